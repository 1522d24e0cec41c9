"""
Domain events and the in-process dispatcher that delivers them.

The booking write path never talks to notification or audit storage
directly. It returns events; the API layer hands them to the dispatcher as
a background task that runs after the booking has been committed and the
response sent. Handlers are isolated from each other and from the caller:
an exception is logged and counted, then the next handler runs.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Iterable, Optional, Type
import uuid

from resource_booking.core.logging import get_logger
from resource_booking.core.metrics import record_side_effect_failure

logger = get_logger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex, init=False)
    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), init=False
    )


@dataclass(frozen=True, kw_only=True)
class BookingCreated(DomainEvent):
    booking_id: int
    resource_id: int
    resource_name: str
    requester_id: int
    status: str


@dataclass(frozen=True, kw_only=True)
class BookingStatusChanged(DomainEvent):
    booking_id: int
    resource_id: int
    resource_name: str
    requester_id: int
    actor_id: int
    status: str
    admin_note: Optional[str] = None


Handler = Callable[[DomainEvent], Awaitable[None]]


class EventDispatcher:
    """Routes each event to every handler registered for its type (1:N)."""

    def __init__(self):
        self._handlers: dict[Type[DomainEvent], list[Handler]] = {}

    def subscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    async def publish(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            event_type = type(event)
            handlers = self._handlers.get(event_type, [])
            if not handlers:
                logger.warning("event_unhandled", event_type=event_type.__name__)
                continue

            for handler in handlers:
                try:
                    await handler(event)
                except Exception as e:
                    record_side_effect_failure("handler")
                    logger.error(
                        "event_handler_failed",
                        event_type=event_type.__name__,
                        event_id=event.event_id,
                        handler=getattr(handler, "__name__", repr(handler)),
                        error=str(e),
                        exc_info=True,
                    )
