"""eventrelay data models — all Pydantic v2, all frozen (immutable)."""

from eventrelay.models.envelopes import (
    EVENT_TYPE_ATTRIBUTE,
    UNKNOWN_EVENT_TYPE,
    Envelope,
    Notification,
    parse_sns_event,
)
from eventrelay.models.events import (
    EVENT_TYPE_MAP,
    DomainEvent,
    ProductCreatedEvent,
    UserCreatedEvent,
)
from eventrelay.models.results import (
    BatchResult,
    FailureKind,
    HandlerError,
    NotificationFailure,
    RouteOutcome,
    RouteStatus,
)

__all__ = [
    # events
    "DomainEvent",
    "UserCreatedEvent",
    "ProductCreatedEvent",
    "EVENT_TYPE_MAP",
    # envelopes
    "Envelope",
    "Notification",
    "EVENT_TYPE_ATTRIBUTE",
    "UNKNOWN_EVENT_TYPE",
    "parse_sns_event",
    # results
    "RouteStatus",
    "FailureKind",
    "HandlerError",
    "NotificationFailure",
    "RouteOutcome",
    "BatchResult",
]
