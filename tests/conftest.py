"""Shared test fixtures for eventrelay."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import pytest

from eventrelay.core.codec import EventCodec
from eventrelay.core.coordinator import BatchCoordinator
from eventrelay.handlers import HandlerFailure
from eventrelay.models.envelopes import Notification
from eventrelay.models.events import DomainEvent, ProductCreatedEvent, UserCreatedEvent
from eventrelay.routing.router import EventRouter, SideEffects

CREATED_AT = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Handler test doubles — record every invocation
# ---------------------------------------------------------------------------


class _RecordingHandler:
    """Common behaviour: optional delay, optional failure, cancellation count."""

    def __init__(self, name: str, *, fail: bool = False, delay: float = 0.0) -> None:
        self.name = name
        self.fail = fail
        self.delay = delay
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.cancelled = 0

    async def _invoke(self, method: str, **fields: Any) -> None:
        self.calls.append((method, fields))
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        if self.fail:
            raise HandlerFailure(self.name, f"{self.name} is unavailable", context=fields)

    @property
    def call_count(self) -> int:
        return len(self.calls)


class RecordingNotifications(_RecordingHandler):
    def __init__(self, **kwargs: Any) -> None:
        super().__init__("notification", **kwargs)

    async def send_welcome_email(self, email: str, created_at: datetime) -> None:
        await self._invoke("send_welcome_email", email=email, created_at=created_at)

    async def send_product_notification(self, name: str, sku: str, price: Decimal) -> None:
        await self._invoke("send_product_notification", name=name, sku=sku, price=price)


class RecordingAudit(_RecordingHandler):
    def __init__(self, **kwargs: Any) -> None:
        super().__init__("audit", **kwargs)

    async def record_user_created(self, user_id: int, email: str, created_at: datetime) -> None:
        await self._invoke(
            "record_user_created", user_id=user_id, email=email, created_at=created_at
        )

    async def record_product_created(
        self, product_id: int, name: str, sku: str, price: Decimal, created_at: datetime
    ) -> None:
        await self._invoke(
            "record_product_created",
            product_id=product_id,
            name=name,
            sku=sku,
            price=price,
            created_at=created_at,
        )


# ---------------------------------------------------------------------------
# Event and notification factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_user_event() -> Callable[..., UserCreatedEvent]:
    """Factory fixture: build a UserCreatedEvent with sensible defaults."""

    def _factory(**overrides: Any) -> UserCreatedEvent:
        defaults: dict[str, Any] = {
            "user_id": 1,
            "email": "a@b.com",
            "created_at": CREATED_AT,
        }
        defaults.update(overrides)
        return UserCreatedEvent(**defaults)

    return _factory


@pytest.fixture
def make_product_event() -> Callable[..., ProductCreatedEvent]:
    """Factory fixture: build a ProductCreatedEvent with sensible defaults."""

    def _factory(**overrides: Any) -> ProductCreatedEvent:
        defaults: dict[str, Any] = {
            "product_id": 7,
            "name": "Desk Lamp",
            "sku": "LAMP-007",
            "supplier": "Lumen Ltd",
            "price": Decimal("49.95"),
            "created_at": CREATED_AT,
        }
        defaults.update(overrides)
        return ProductCreatedEvent(**defaults)

    return _factory


@pytest.fixture
def codec() -> EventCodec:
    return EventCodec()


@pytest.fixture
def make_notification(codec: EventCodec) -> Callable[..., Notification]:
    """Factory fixture: encode an event into a broker notification."""

    def _factory(event: DomainEvent, delivery_id: str = "msg-001") -> Notification:
        envelope = codec.encode(event)
        return Notification(
            delivery_id=delivery_id,
            message=envelope.message,
            attributes=envelope.attributes,
        )

    return _factory


# ---------------------------------------------------------------------------
# Handlers, router, coordinator
# ---------------------------------------------------------------------------


@pytest.fixture
def notifications() -> RecordingNotifications:
    return RecordingNotifications()


@pytest.fixture
def audit() -> RecordingAudit:
    return RecordingAudit()


@pytest.fixture
def make_doubles() -> Callable[..., tuple[RecordingNotifications, RecordingAudit]]:
    """Factory fixture: build a configurable (notifications, audit) pair."""

    def _factory(
        *,
        notifications_fail: bool = False,
        audit_fail: bool = False,
        delay: float = 0.0,
    ) -> tuple[RecordingNotifications, RecordingAudit]:
        return (
            RecordingNotifications(fail=notifications_fail, delay=delay),
            RecordingAudit(fail=audit_fail, delay=delay),
        )

    return _factory


@pytest.fixture
def router(notifications: RecordingNotifications, audit: RecordingAudit) -> EventRouter:
    """Provide an EventRouter wired to recording handler doubles."""
    return EventRouter(SideEffects(notifications=notifications, audit=audit))


@pytest.fixture
def coordinator(router: EventRouter) -> BatchCoordinator:
    """Provide a BatchCoordinator with the default deadline constants."""
    return BatchCoordinator(router)
