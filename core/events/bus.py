"""In-memory event bus.

Handlers are plain callables keyed by exact event type. publish() calls them
in subscription order; a handler that raises is logged and skipped so the
remaining handlers still run (fail-open). Publishers never see handler
exceptions.

Usage:
    >>> bus = EventBus()
    >>> bus.subscribe(UserStartedSponsoring, send_thank_you)
    >>> bus.publish(UserStartedSponsoring(user_id=1, sponsor_id=7))
"""

from collections import defaultdict
from collections.abc import Callable
from functools import lru_cache

from core.logging import get_logger

from .base import DomainEvent

EventHandler = Callable[[DomainEvent], None]

logger = get_logger("events")


class EventBus:
    """Synchronous, fail-open domain event dispatcher."""

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """Register a handler for an event type (exact type match, no inheritance)."""
        self._handlers[event_type].append(handler)

    def handlers_for(self, event_type: type[DomainEvent]) -> list[EventHandler]:
        return list(self._handlers.get(event_type, []))

    def publish(self, event: DomainEvent) -> None:
        """Dispatch an event to every handler registered for its type."""
        event_type = type(event)
        handlers = self._handlers.get(event_type, [])

        if not handlers:
            return

        logger.debug(
            "event_publishing",
            event_type=event_type.__name__,
            event_id=str(event.event_id),
            handler_count=len(handlers),
        )

        for handler in list(handlers):
            try:
                handler(event)
            except Exception as e:
                logger.warning(
                    "event_handler_failed",
                    event_type=event_type.__name__,
                    event_id=str(event.event_id),
                    handler=getattr(handler, "__name__", repr(handler)),
                    error=str(e),
                    error_type=type(e).__name__,
                )


@lru_cache(maxsize=1)
def get_event_bus() -> EventBus:
    """
    Process-wide event bus with the default handlers registered.

    Also used as a FastAPI dependency; tests override it with a recording bus.
    """
    from .handlers import register_default_handlers

    bus = EventBus()
    register_default_handlers(bus)
    return bus


class BufferedEventBus(EventBus):
    """
    Holds published events until flush().

    Lets a unit of work announce its changes only after they are committed:
    publish into the buffer inside the transaction, flush to the real bus once
    it has been committed. Events never flushed are dropped.
    """

    def __init__(self) -> None:
        super().__init__()
        self.pending: list[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self.pending.append(event)

    def flush(self, target: EventBus) -> int:
        """Publish the held events on ``target`` in order; returns how many."""
        events, self.pending = self.pending, []
        for event in events:
            target.publish(event)
        return len(events)
