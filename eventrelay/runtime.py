"""Invocation entry point — wires the consumer and handles one SNS batch.

Handler reference for the function runtime: ``eventrelay.runtime.lambda_handler``.
The coordinator is built once per process (warm start) and reused across
invocations.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from eventrelay.config import RelayConfig, config
from eventrelay.core.codec import EventCodec
from eventrelay.core.coordinator import BatchCoordinator
from eventrelay.handlers.audit import AuditService, AuditTrail, LoggingAuditTrail
from eventrelay.handlers.notification import (
    EmailOutbox,
    LoggingOutbox,
    NotificationService,
)
from eventrelay.models.envelopes import parse_sns_event
from eventrelay.routing.router import ROUTING_TABLE, EventRouter, SideEffects

logger = logging.getLogger(__name__)

_coordinator: BatchCoordinator | None = None


def build_coordinator(
    settings: RelayConfig | None = None,
    *,
    outbox: EmailOutbox | None = None,
    trail: AuditTrail | None = None,
) -> BatchCoordinator:
    """Assemble codec, handlers, router and coordinator from *settings*.

    Without an explicit *outbox* or *trail* the handlers only log, so a
    warm process retains nothing between invocations.
    """
    settings = settings or config
    effects = SideEffects(
        notifications=NotificationService(
            outbox if outbox is not None else LoggingOutbox(),
            sender=settings.email_sender,
            product_recipient=settings.product_notification_recipient,
        ),
        audit=AuditService(trail if trail is not None else LoggingAuditTrail()),
    )
    codec = EventCodec(
        settings.codec_config(),
        registry={tag: route.event_type for tag, route in ROUTING_TABLE.items()},
    )
    router = EventRouter(effects, codec=codec)
    return BatchCoordinator(
        router,
        safety_margin=settings.safety_margin_seconds,
        minimum_floor=settings.minimum_floor_seconds,
    )


def _get_coordinator() -> BatchCoordinator:
    global _coordinator
    if _coordinator is None:
        logging.basicConfig(level=config.log_level.upper())
        _coordinator = build_coordinator(config)
    return _coordinator


def lambda_handler(event: dict[str, Any], context: Any) -> str:
    """Process one SNS-triggered invocation.

    Returns the success summary.  Re-raises ``BatchProcessingError`` when
    any record failed so the runtime treats the whole batch as failed.
    """
    coordinator = _get_coordinator()
    notifications = parse_sns_event(event)
    remaining = context.get_remaining_time_in_millis() / 1000.0
    logger.info("Received SNS event with %d records", len(notifications))
    return asyncio.run(coordinator.handle(notifications, remaining))
