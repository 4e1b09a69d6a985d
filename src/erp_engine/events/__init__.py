"""Domain events package."""

from erp_engine.events.emitter import EventBatch, EventEmitter, log_event
from erp_engine.events.types import (
    DomainEvent,
    EventCategory,
    EventMetadata,
    JournalEntryPosted,
    PayrollRunRecorded,
)

__all__ = [
    "DomainEvent",
    "EventCategory",
    "EventMetadata",
    "JournalEntryPosted",
    "PayrollRunRecorded",
    "EventBatch",
    "EventEmitter",
    "log_event",
]
