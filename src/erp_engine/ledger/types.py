"""Type definitions for journal posting."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from erp_engine.events.types import DomainEvent


class JournalType(str, Enum):
    """Journals an entry can be posted to."""

    GENERAL = "General"
    SALES = "Sales"
    PURCHASE = "Purchase"
    CASH = "Cash"
    BANK = "Bank"

    @property
    def prefix(self) -> str:
        """Entry-number prefix for this journal."""
        return _PREFIXES[self]


_PREFIXES = {
    JournalType.GENERAL: "GJ",
    JournalType.SALES: "SJ",
    JournalType.PURCHASE: "PJ",
    JournalType.CASH: "CJ",
    JournalType.BANK: "BJ",
}


def format_entry_number(journal_type: JournalType, entry_date: date, sequence: int) -> str:
    """Build an entry number such as ``SJ-20250115-0001``."""
    return f"{journal_type.prefix}-{entry_date:%Y%m%d}-{sequence:04d}"


@dataclass(frozen=True)
class JournalLineSpec:
    """One requested line of a journal entry, before persistence."""

    account_code: str
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    auxiliary: str | None = None
    cost_center: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class PostJournalCommand:
    """Request to post one journal entry.

    ``period_id`` pins the target period; when omitted the poster uses the
    open period covering the current date. ``actor_id`` identifies the
    authenticated caller and is stored on the entry as-is.
    """

    entry_date: date
    lines: tuple[JournalLineSpec, ...]
    reference: str = ""
    memo: str = ""
    journal_type: JournalType = JournalType.GENERAL
    period_id: UUID | None = None
    actor_id: str | None = None

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))


@dataclass(frozen=True)
class PostResult:
    """Result of a successful post."""

    entry_id: UUID
    entry_number: str
    period_id: UUID
    total_debit: Decimal
    total_credit: Decimal
    attempts: int = 1
    events: tuple[DomainEvent, ...] = field(default_factory=tuple)
