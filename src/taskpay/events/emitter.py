"""Event emitter for publishing domain events.

The emitter provides:
- Handler registration with type filtering
- Category-based routing
- Error isolation (handler failures don't break other handlers)
- Unsubscribe callables returned from every registration
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol, TypeVar, runtime_checkable

from taskpay.events.types import DomainEvent, EventCategory

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DomainEvent)

Unsubscribe = Callable[[], None]


@runtime_checkable
class EventHandler(Protocol):
    """Protocol for synchronous event handlers."""

    def __call__(self, event: DomainEvent) -> None:
        """Handle a domain event."""
        ...


@dataclass
class HandlerRegistration:
    """Registration of an event handler."""

    handler: EventHandler
    event_types: set[str] | None  # None = all events
    categories: set[EventCategory] | None  # None = all categories


class EventEmitter:
    """Synchronous event emitter.

    Usage:
        emitter = EventEmitter()

        # Register handler for specific event type
        unsubscribe = emitter.on(PaymentReleased, notify_employee)

        # Register handler for category
        emitter.on_category(EventCategory.WITHDRAWAL, audit_withdrawals)

        # Emit event
        emitter.emit(payment_released_event)

        unsubscribe()
    """

    def __init__(self) -> None:
        self._handlers: list[HandlerRegistration] = []

    def on(
        self,
        event_type: type[T] | list[type[T]],
        handler: EventHandler,
    ) -> Unsubscribe:
        """Register handler for specific event type(s)."""
        if isinstance(event_type, list):
            types = {t.__name__ for t in event_type}
        else:
            types = {event_type.__name__}
        return self._register(HandlerRegistration(handler, types, None))

    def on_category(
        self,
        category: EventCategory | list[EventCategory],
        handler: EventHandler,
    ) -> Unsubscribe:
        """Register handler for event category(ies)."""
        cats = set(category) if isinstance(category, list) else {category}
        return self._register(HandlerRegistration(handler, None, cats))

    def on_all(self, handler: EventHandler) -> Unsubscribe:
        """Register handler for all events."""
        return self._register(HandlerRegistration(handler, None, None))

    def off(self, handler: EventHandler) -> None:
        """Unregister a handler."""
        self._handlers = [reg for reg in self._handlers if reg.handler is not handler]

    def emit(self, event: DomainEvent) -> list[Exception]:
        """Emit an event to all matching handlers.

        Returns list of any exceptions raised by handlers.
        Handlers are isolated - failures don't stop other handlers.
        """
        errors: list[Exception] = []
        event_type = event.event_type
        event_category = event.category

        for reg in list(self._handlers):
            if reg.event_types and event_type not in reg.event_types:
                continue
            if reg.categories and event_category not in reg.categories:
                continue

            try:
                reg.handler(event)
            except Exception as e:
                logger.exception(
                    "Handler %s failed for event %s",
                    reg.handler,
                    event_type,
                )
                errors.append(e)

        return errors

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def _register(self, registration: HandlerRegistration) -> Unsubscribe:
        self._handlers.append(registration)

        def unsubscribe() -> None:
            self._handlers = [reg for reg in self._handlers if reg is not registration]

        return unsubscribe


def log_event(event: DomainEvent) -> None:
    """Handler that writes every event to the log as JSON."""
    logger.info("%s %s", event.event_type, event.to_json())
