"""Domain event types for ledger and payroll operations.

Events are immutable values returned by the operation that produced them.
The caller hands them to a dispatcher (see ``EventEmitter``) once the
surrounding transaction has committed.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class EventCategory(str, Enum):
    """Event categories for routing and filtering."""

    LEDGER = "ledger"
    PAYROLL = "payroll"


@dataclass(frozen=True)
class EventMetadata:
    """Metadata attached to every domain event."""

    event_id: UUID
    timestamp: datetime
    correlation_id: UUID  # Links related events
    actor_id: str | None  # Authenticated caller, never invented by the core
    actor_type: str  # 'user', 'system'
    source_service: str
    version: int = 1  # Schema version for evolution

    @classmethod
    def create(
        cls,
        actor_id: str | None = None,
        correlation_id: UUID | None = None,
        actor_type: str | None = None,
        source_service: str = "erp",
    ) -> EventMetadata:
        """Create metadata with auto-generated fields."""
        return cls(
            event_id=uuid4(),
            timestamp=datetime.now(timezone.utc),
            correlation_id=correlation_id or uuid4(),
            actor_id=actor_id,
            actor_type=actor_type or ("user" if actor_id else "system"),
            source_service=source_service,
        )


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    metadata: EventMetadata

    @property
    def event_type(self) -> str:
        """Event type name for routing."""
        return self.__class__.__name__

    @property
    def category(self) -> EventCategory:
        """Event category for filtering."""
        raise NotImplementedError("Subclasses must define category")

    def to_dict(self) -> dict[str, Any]:
        """Serialize event to dictionary."""
        data = _serialize_dict(asdict(self))
        data["event_type"] = self.event_type
        data["category"] = self.category.value
        return data

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps(self.to_dict(), default=str)


def _serialize_dict(obj: Any) -> Any:
    """Recursively serialize objects for JSON compatibility."""
    if isinstance(obj, dict):
        return {k: _serialize_dict(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_serialize_dict(v) for v in obj]
    elif isinstance(obj, UUID):
        return str(obj)
    elif isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, Decimal):
        return str(obj)
    elif isinstance(obj, Enum):
        return obj.value
    return obj


# =============================================================================
# Ledger Events
# =============================================================================


@dataclass(frozen=True)
class JournalEntryPosted(DomainEvent):
    """A balanced journal entry was posted to an open period."""

    entry_id: UUID
    entry_number: str
    entry_date: date
    journal_type: str
    period_id: UUID
    total_debit: Decimal
    total_credit: Decimal
    line_count: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.LEDGER


# =============================================================================
# Payroll Events
# =============================================================================


@dataclass(frozen=True)
class PayrollRunRecorded(DomainEvent):
    """A payroll run was computed and stored for one employee and period."""

    payroll_run_id: UUID
    employee_id: UUID
    period: str
    schedule_code: str
    gross_salary: Decimal
    net_salary: Decimal
    total_contributions: Decimal

    @property
    def category(self) -> EventCategory:
        return EventCategory.PAYROLL
