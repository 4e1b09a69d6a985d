"""Double-entry journal posting."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from erp_engine.config import get_settings
from erp_engine.errors import (
    ConcurrentPostConflict,
    DateOutsidePeriod,
    InvalidJournalLine,
    NoOpenPeriod,
    UnbalancedEntry,
    UnknownOrInactiveAccount,
)
from erp_engine.events.types import EventMetadata, JournalEntryPosted
from erp_engine.ledger.repository import FinanceRepository
from erp_engine.ledger.types import (
    JournalLineSpec,
    JournalType,
    PostJournalCommand,
    PostResult,
    format_entry_number,
)
from erp_engine.models import FinancialPeriod, JournalEntry, JournalLine

logger = logging.getLogger(__name__)

# Constraint violations that mean another post took our sequence number
_SEQUENCE_CONFLICT_MARKERS = (
    "journal_entry_sequence_key",
    "journal_entry.sequence",
    "journal_entry.entry_number",
    "journal_entry_entry_number_key",
)

# Line amounts must fit the Numeric(18, 2) money columns exactly
CENT = Decimal("0.01")
MONEY_LIMIT = Decimal("1e16")


class JournalPoster:
    """Validates and persists double-entry journal entries.

    Posting pipeline (fail fast, nothing is written on failure):
    1) Total debit equals total credit (exact decimal comparison)
    2) Each line carries exactly one positive amount, in whole cents
    3) Each distinct account code resolves to an active account
    4) Resolve the target period (explicit, or open period covering today)
    5) Entry date lies inside the period window
    6) Allocate the entry number from the (journal, date) sequence
    7) Materialize lines in input order and recompute totals
    8) Re-check the recomputed totals
    9) Insert entry and lines inside one savepoint

    A unique constraint on (journal_type, entry_date, sequence) catches
    concurrent posts that computed the same sequence; the whole pipeline is
    retried up to ``max_attempts`` times before ConcurrentPostConflict.
    """

    def __init__(
        self,
        session: AsyncSession,
        repository: FinanceRepository | None = None,
        *,
        max_attempts: int | None = None,
        clock: Callable[[], date] | None = None,
    ):
        self.session = session
        self.repository = repository or FinanceRepository(session)
        if max_attempts is None:
            max_attempts = get_settings().post_max_attempts
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.clock = clock or date.today

    async def post(self, command: PostJournalCommand) -> PostResult:
        """Post a journal entry and return its identity and events."""
        journal_type = JournalType(command.journal_type)

        for attempt in range(1, self.max_attempts + 1):
            try:
                async with self.session.begin_nested():
                    entry = await self._post_once(command, journal_type)
            except IntegrityError as exc:
                if not _is_sequence_conflict(exc):
                    raise
                logger.warning(
                    "Entry number collision for %s on %s (attempt %s/%s)",
                    journal_type.value,
                    command.entry_date,
                    attempt,
                    self.max_attempts,
                )
                continue

            logger.info(
                "Journal entry %s posted with ID %s",
                entry.entry_number,
                entry.entry_id,
            )
            event = JournalEntryPosted(
                metadata=EventMetadata.create(actor_id=command.actor_id),
                entry_id=entry.entry_id,
                entry_number=entry.entry_number,
                entry_date=entry.entry_date,
                journal_type=entry.journal_type,
                period_id=entry.period_id,
                total_debit=entry.total_debit,
                total_credit=entry.total_credit,
                line_count=len(entry.lines),
            )
            return PostResult(
                entry_id=entry.entry_id,
                entry_number=entry.entry_number,
                period_id=entry.period_id,
                total_debit=entry.total_debit,
                total_credit=entry.total_credit,
                attempts=attempt,
                events=(event,),
            )

        raise ConcurrentPostConflict(journal_type.value, command.entry_date, self.max_attempts)

    async def _post_once(
        self, command: PostJournalCommand, journal_type: JournalType
    ) -> JournalEntry:
        total_debit = command.total_debit
        total_credit = command.total_credit
        if total_debit != total_credit:
            raise UnbalancedEntry(total_debit, total_credit)

        self._check_lines(command.lines)
        await self._check_accounts(command.lines)

        period = await self._resolve_period(command)
        if not period.contains(command.entry_date):
            raise DateOutsidePeriod(command.entry_date, period.start_date, period.end_date)

        sequence = await self.repository.count_entries(journal_type.value, command.entry_date) + 1
        entry = JournalEntry(
            entry_id=uuid4(),
            entry_number=format_entry_number(journal_type, command.entry_date, sequence),
            entry_date=command.entry_date,
            reference=command.reference,
            memo=command.memo,
            journal_type=journal_type.value,
            sequence=sequence,
            period_id=period.period_id,
            is_posted=True,
            posted_at=datetime.now(timezone.utc),
            posted_by=command.actor_id,
        )
        for line_number, spec in enumerate(command.lines, start=1):
            entry.lines.append(
                JournalLine(
                    line_id=uuid4(),
                    line_number=line_number,
                    account_code=spec.account_code,
                    debit=spec.debit,
                    credit=spec.credit,
                    auxiliary=spec.auxiliary,
                    cost_center=spec.cost_center,
                    description=spec.description,
                )
            )

        entry.calculate_totals()
        if not entry.is_balanced():
            raise UnbalancedEntry(entry.total_debit, entry.total_credit)

        await self.repository.save_entry(entry)
        return entry

    def _check_lines(self, lines: Sequence[JournalLineSpec]) -> None:
        """Each line must carry exactly one positive amount that fits the money columns."""
        if not lines:
            raise InvalidJournalLine(None, "entry has no lines")

        zero = Decimal("0")
        for line_number, line in enumerate(lines, start=1):
            if line.debit < zero or line.credit < zero:
                raise InvalidJournalLine(line_number, "amounts must not be negative")
            for amount in (line.debit, line.credit):
                _check_money(line_number, amount)
            if line.debit != zero and line.credit != zero:
                raise InvalidJournalLine(line_number, "line has both a debit and a credit")
            if line.debit == zero and line.credit == zero:
                raise InvalidJournalLine(line_number, "line has neither a debit nor a credit")

    async def _check_accounts(self, lines: Sequence[JournalLineSpec]) -> None:
        # One lookup per distinct code, in order of first appearance
        for code in dict.fromkeys(line.account_code for line in lines):
            if not await self.repository.account_is_active(code):
                raise UnknownOrInactiveAccount(code)

    async def _resolve_period(self, command: PostJournalCommand) -> FinancialPeriod:
        if command.period_id is not None:
            period = await self.repository.get_period(command.period_id)
            if period is None or not period.is_open:
                raise NoOpenPeriod(period_id=command.period_id)
            return period

        today = self.clock()
        period = await self.repository.find_open_period_containing(today)
        if period is None:
            raise NoOpenPeriod(as_of=today)
        return period


def _check_money(line_number: int, amount: Decimal) -> None:
    if amount >= MONEY_LIMIT:
        raise InvalidJournalLine(line_number, "amount exceeds 16 integer digits")
    if amount != amount.quantize(CENT):
        raise InvalidJournalLine(line_number, "amount has more than 2 decimal places")


def _is_sequence_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in _SEQUENCE_CONFLICT_MARKERS)
