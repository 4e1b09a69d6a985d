"""Data access for accounts, financial periods and journal entries."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp_engine.models import Account, FinancialPeriod, JournalEntry


class FinanceRepository:
    """Queries used by the journal poster."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_account_by_code(self, code: str) -> Account | None:
        """Get an active account by its code."""
        result = await self.session.execute(
            select(Account).where(Account.code == code, Account.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def account_is_active(self, code: str) -> bool:
        result = await self.session.execute(
            select(func.count())
            .select_from(Account)
            .where(Account.code == code, Account.is_active.is_(True))
        )
        return (result.scalar() or 0) > 0

    async def find_open_period_containing(self, day: date) -> FinancialPeriod | None:
        """Get the open period whose window covers ``day``."""
        result = await self.session.execute(
            select(FinancialPeriod)
            .where(
                FinancialPeriod.start_date <= day,
                FinancialPeriod.end_date >= day,
                FinancialPeriod.status == "Open",
            )
            .order_by(FinancialPeriod.start_date)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_period(self, period_id: UUID) -> FinancialPeriod | None:
        return await self.session.get(FinancialPeriod, period_id)

    async def count_entries(self, journal_type: str, entry_date: date) -> int:
        """Count entries already posted to a journal on a date."""
        result = await self.session.execute(
            select(func.count())
            .select_from(JournalEntry)
            .where(
                JournalEntry.journal_type == journal_type,
                JournalEntry.entry_date == entry_date,
            )
        )
        return result.scalar() or 0

    async def save_entry(self, entry: JournalEntry) -> None:
        """Stage an entry with its lines and flush it."""
        self.session.add(entry)
        await self.session.flush()

    async def get_entry(self, entry_id: UUID) -> JournalEntry | None:
        """Load an entry together with its lines."""
        result = await self.session.execute(
            select(JournalEntry)
            .where(JournalEntry.entry_id == entry_id)
            .options(selectinload(JournalEntry.lines))
        )
        return result.scalar_one_or_none()
