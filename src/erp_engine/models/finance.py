"""Ledger models: chart of accounts, periods and journal entries."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_engine.models.base import MONEY, Base, TimestampMixin


class Account(Base, TimestampMixin):
    """Chart of accounts entry, keyed by its business code."""

    __tablename__ = "account"

    account_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    nature: Mapped[str] = mapped_column(String(10), nullable=False)
    # SYSCOHADA class (1-9), optional
    account_class: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint(
            "nature IN ('ACTIF', 'PASSIF', 'CHARGE', 'PRODUIT')",
            name="account_nature_check",
        ),
        CheckConstraint(
            "account_class IS NULL OR account_class BETWEEN 1 AND 9",
            name="account_class_check",
        ),
    )


class FinancialPeriod(Base, TimestampMixin):
    """Accounting period with an Open/Closed status."""

    __tablename__ = "financial_period"

    period_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Open")

    __table_args__ = (
        CheckConstraint("status IN ('Open', 'Closed')", name="financial_period_status_check"),
        CheckConstraint("start_date <= end_date", name="financial_period_range_check"),
    )

    @property
    def is_open(self) -> bool:
        return self.status == "Open"

    def contains(self, day: date) -> bool:
        """True if day falls within [start_date, end_date]."""
        return self.start_date <= day <= self.end_date


class JournalEntry(Base, TimestampMixin):
    """Posted journal entry (aggregate root owning its lines)."""

    __tablename__ = "journal_entry"

    entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    entry_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    reference: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    memo: Mapped[str] = mapped_column(Text, nullable=False, default="")
    journal_type: Mapped[str] = mapped_column(String(20), nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    period_id: Mapped[UUID] = mapped_column(
        ForeignKey("financial_period.period_id"),
        nullable=False,
    )
    total_debit: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_credit: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    is_posted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    posted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    posted_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "journal_type", "entry_date", "sequence",
            name="journal_entry_sequence_key",
        ),
        CheckConstraint(
            "journal_type IN ('General', 'Sales', 'Purchase', 'Cash', 'Bank')",
            name="journal_entry_type_check",
        ),
        CheckConstraint("total_debit = total_credit", name="journal_entry_balanced_check"),
    )

    # Relationships
    period: Mapped[FinancialPeriod] = relationship()
    lines: Mapped[list[JournalLine]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.line_number",
    )

    def calculate_totals(self) -> None:
        """Recompute total debit/credit from the owned lines."""
        self.total_debit = sum((line.debit for line in self.lines), Decimal("0"))
        self.total_credit = sum((line.credit for line in self.lines), Decimal("0"))

    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


class JournalLine(Base):
    """One debit or credit line of a journal entry."""

    __tablename__ = "journal_line"

    line_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    entry_id: Mapped[UUID] = mapped_column(
        ForeignKey("journal_entry.entry_id", ondelete="CASCADE"),
        nullable=False,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    account_code: Mapped[str] = mapped_column(
        ForeignKey("account.code"),
        nullable=False,
    )
    debit: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    credit: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    auxiliary: Mapped[str | None] = mapped_column(String(50), nullable=True)
    cost_center: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)

    __table_args__ = (
        UniqueConstraint("entry_id", "line_number", name="journal_line_number_key"),
        CheckConstraint(
            "(debit = 0 AND credit > 0) OR (credit = 0 AND debit > 0)",
            name="journal_line_debit_credit_check",
        ),
    )

    # Relationships
    entry: Mapped[JournalEntry] = relationship(back_populates="lines")
