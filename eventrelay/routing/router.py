"""EventRouter — decodes one notification and fans it out to its handlers.

Every decoded event is delivered to both of its side-effect handlers
concurrently.  Both are always attempted; a failure in one never cancels
the other, and the outcome lists every handler error.  Unknown type tags
are skipped with a warning rather than failed.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping

from eventrelay.core.codec import EventCodec, MalformedPayload, UnknownEventType
from eventrelay.handlers.audit import AuditService
from eventrelay.handlers.notification import NotificationService
from eventrelay.models.events import DomainEvent, ProductCreatedEvent, UserCreatedEvent
from eventrelay.models.results import (
    FailureKind,
    HandlerError,
    NotificationFailure,
    RouteOutcome,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SideEffects:
    """The handler collaborators available to effect plans."""

    notifications: NotificationService
    audit: AuditService


EffectPlan = Callable[[Any, SideEffects], dict[str, Awaitable[None]]]


@dataclass(frozen=True)
class Route:
    """Routing table entry: which class to decode into and what to run."""

    event_type: type[DomainEvent]
    effects: EffectPlan


def _user_created_effects(event: UserCreatedEvent, fx: SideEffects) -> dict[str, Awaitable[None]]:
    return {
        "welcome_email": fx.notifications.send_welcome_email(event.email, event.created_at),
        "audit": fx.audit.record_user_created(event.user_id, event.email, event.created_at),
    }


def _product_created_effects(
    event: ProductCreatedEvent, fx: SideEffects
) -> dict[str, Awaitable[None]]:
    return {
        "product_email": fx.notifications.send_product_notification(
            event.name, event.sku, event.price
        ),
        "audit": fx.audit.record_product_created(
            event.product_id, event.name, event.sku, event.price, event.created_at
        ),
    }


ROUTING_TABLE: Mapping[str, Route] = MappingProxyType(
    {
        UserCreatedEvent.type_tag(): Route(UserCreatedEvent, _user_created_effects),
        ProductCreatedEvent.type_tag(): Route(ProductCreatedEvent, _product_created_effects),
    }
)


class EventRouter:
    """Routes notifications to their side-effect handlers.

    Parameters
    ----------
    effects:
        Handler collaborators passed to each route's effect plan.
    codec:
        Codec used to decode payloads.  Built from the routing table's
        event classes when omitted, so both agree on the known tags.
    table:
        Type tag to ``Route`` mapping.  Defaults to ``ROUTING_TABLE``.
    """

    def __init__(
        self,
        effects: SideEffects,
        *,
        codec: EventCodec | None = None,
        table: Mapping[str, Route] | None = None,
    ) -> None:
        self._effects = effects
        self._table = table if table is not None else ROUTING_TABLE
        self._codec = codec or EventCodec(
            registry={tag: route.event_type for tag, route in self._table.items()}
        )

    @property
    def known_types(self) -> list[str]:
        return sorted(self._table)

    async def route(
        self, type_tag: str, raw_payload: str | bytes, *, delivery_id: str = ""
    ) -> RouteOutcome:
        """Decode *raw_payload* as *type_tag* and run both of its handlers.

        Returns a ``skipped`` outcome for unknown tags, ``failed`` for
        decode or handler errors, ``succeeded`` otherwise.  Never raises
        for per-notification problems.
        """
        route = self._table.get(type_tag)
        if route is None:
            logger.warning(
                "Unknown event type %r in message %s; skipping", type_tag, delivery_id
            )
            return RouteOutcome.skipped(delivery_id, type_tag)

        try:
            event = self._codec.decode(type_tag, raw_payload)
        except UnknownEventType:
            logger.warning(
                "Event type %r has no codec registration (message %s); skipping",
                type_tag,
                delivery_id,
            )
            return RouteOutcome.skipped(delivery_id, type_tag)
        except MalformedPayload as exc:
            failure = NotificationFailure(
                delivery_id=delivery_id,
                type_tag=type_tag,
                kind=FailureKind.MALFORMED_PAYLOAD,
                message=str(exc),
            )
            logger.error("Failed to decode message %s: %s", delivery_id, exc)
            return RouteOutcome.failed(failure)

        logger.info("Processing %s from message %s", type_tag, delivery_id)
        handler_errors = await self._run_effects(route, event)

        if handler_errors:
            failure = NotificationFailure(
                delivery_id=delivery_id,
                type_tag=type_tag,
                kind=FailureKind.HANDLER_FAILURE,
                message=f"{len(handler_errors)} handler(s) failed",
                subject=event.subject,
                handler_errors=handler_errors,
            )
            logger.error(
                "Handlers failed for message %s (%s %s): %s",
                delivery_id,
                type_tag,
                event.subject,
                "; ".join(f"{e.handler}: {e.message}" for e in handler_errors),
            )
            return RouteOutcome.failed(failure)

        logger.info(
            "%s processed successfully for %s (message %s)",
            type_tag,
            event.subject,
            delivery_id,
        )
        return RouteOutcome.succeeded(delivery_id, type_tag)

    async def _run_effects(self, route: Route, event: DomainEvent) -> list[HandlerError]:
        """Run every handler of *route* concurrently and collect their errors."""
        calls = route.effects(event, self._effects)
        names = list(calls)
        results = await asyncio.gather(*calls.values(), return_exceptions=True)

        errors: list[HandlerError] = []
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                message = str(result) or type(result).__name__
                errors.append(HandlerError(handler=name, message=message))
            else:
                logger.debug("Handler %s completed for %s", name, event.subject)
        return errors
