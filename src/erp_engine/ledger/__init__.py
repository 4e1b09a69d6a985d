"""Journal posting."""

from erp_engine.ledger.poster import JournalPoster
from erp_engine.ledger.repository import FinanceRepository
from erp_engine.ledger.types import (
    JournalLineSpec,
    JournalType,
    PostJournalCommand,
    PostResult,
    format_entry_number,
)

__all__ = [
    "JournalPoster",
    "FinanceRepository",
    "JournalLineSpec",
    "JournalType",
    "PostJournalCommand",
    "PostResult",
    "format_entry_number",
]
