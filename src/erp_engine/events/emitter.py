"""In-process dispatch of ledger and payroll events.

Handlers subscribe by event class, by category, or to everything. A handler
that raises is logged and skipped; the remaining handlers still run and the
caller gets the collected exceptions back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from erp_engine.events.types import DomainEvent, EventCategory

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Any]


@dataclass(frozen=True)
class Subscription:
    """A handler and the filter deciding which events reach it."""

    handler: EventHandler
    event_types: frozenset[str] = frozenset()  # empty = any type
    categories: frozenset[EventCategory] = frozenset()  # empty = any category

    def accepts(self, event: DomainEvent) -> bool:
        if self.event_types and event.event_type not in self.event_types:
            return False
        if self.categories and event.category not in self.categories:
            return False
        return True


class EventEmitter:
    """Synchronous publisher used after a transaction commits.

    Usage:
        emitter = EventEmitter()
        emitter.on(JournalEntryPosted, notify_accounting)
        emitter.on_category(EventCategory.PAYROLL, audit_payroll)

        result = await poster.post(command)
        await session.commit()
        emitter.emit_all(result.events)
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._pending: list[DomainEvent] | None = None

    def on(
        self,
        event_type: type[DomainEvent] | Iterable[type[DomainEvent]],
        handler: EventHandler,
    ) -> None:
        """Subscribe to one or more event classes."""
        classes = [event_type] if isinstance(event_type, type) else list(event_type)
        self._subscriptions.append(
            Subscription(handler, event_types=frozenset(cls.__name__ for cls in classes))
        )

    def on_category(
        self,
        category: EventCategory | Iterable[EventCategory],
        handler: EventHandler,
    ) -> None:
        """Subscribe to every event of one or more categories."""
        categories = [category] if isinstance(category, EventCategory) else list(category)
        self._subscriptions.append(Subscription(handler, categories=frozenset(categories)))

    def on_all(self, handler: EventHandler) -> None:
        self._subscriptions.append(Subscription(handler))

    def off(self, handler: EventHandler) -> None:
        """Drop every subscription of ``handler``."""
        self._subscriptions = [s for s in self._subscriptions if s.handler is not handler]

    def emit(self, event: DomainEvent) -> list[Exception]:
        """Deliver an event, or hold it while a batch is open."""
        if self._pending is not None:
            self._pending.append(event)
            return []
        return self._deliver(event)

    def emit_all(self, events: Iterable[DomainEvent]) -> list[Exception]:
        errors: list[Exception] = []
        for event in events:
            errors.extend(self.emit(event))
        return errors

    def batch(self) -> EventBatch:
        """Hold events until the returned context exits cleanly."""
        return EventBatch(self)

    def _deliver(self, event: DomainEvent) -> list[Exception]:
        errors: list[Exception] = []
        for subscription in self._subscriptions:
            if not subscription.accepts(event):
                continue
            try:
                subscription.handler(event)
            except Exception as exc:
                logger.exception(
                    "Handler %r failed for event %s",
                    subscription.handler,
                    event.event_type,
                )
                errors.append(exc)
        return errors


class EventBatch:
    """Collects events and delivers them together; discards them on error."""

    def __init__(self, emitter: EventEmitter) -> None:
        self._emitter = emitter
        self.errors: list[Exception] = []

    def __enter__(self) -> EventBatch:
        self._emitter._pending = []
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        held = self._emitter._pending or []
        self._emitter._pending = None
        if exc_type is not None:
            logger.debug("Discarding %s batched events after error", len(held))
            return
        for event in held:
            self.errors.extend(self._emitter._deliver(event))

    def add(self, event: DomainEvent) -> None:
        self._emitter.emit(event)


def log_event(event: DomainEvent) -> None:
    """Handler that records every event in the application log."""
    logger.info("Domain event %s: %s", event.event_type, event.to_json())
