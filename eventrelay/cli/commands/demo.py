"""``eventrelay demo`` — publish sample events and process them as one batch.

Publishes a UserCreatedEvent and a ProductCreatedEvent through an
in-memory broker, drains the broker into a single batch, runs the batch
coordinator over it, and shows the outcome of every record.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import typer
from rich.console import Console

from eventrelay.bridge.broker import InMemoryBroker
from eventrelay.cli.render import render_batch_result
from eventrelay.config import config
from eventrelay.core.publisher import EventPublisher
from eventrelay.handlers.audit import InMemoryAuditTrail
from eventrelay.handlers.notification import InMemoryOutbox
from eventrelay.logging_setup import configure_logging
from eventrelay.models.envelopes import EVENT_TYPE_ATTRIBUTE, Notification
from eventrelay.models.events import ProductCreatedEvent, UserCreatedEvent
from eventrelay.models.results import BatchResult
from eventrelay.runtime import build_coordinator

console = Console()


async def _run_demo(include_unknown: bool, budget: float) -> tuple[BatchResult, int, int]:
    broker = InMemoryBroker(topic=config.topic_arn or "eventrelay-demo")
    publisher = EventPublisher(broker)
    now = datetime.now(timezone.utc)

    await publisher.publish(UserCreatedEvent(user_id=1, email="ada@example.com", created_at=now))
    await publisher.publish(
        ProductCreatedEvent(
            product_id=42,
            name="Mechanical Keyboard",
            sku="KB-042",
            supplier="Acme",
            price=Decimal("129.90"),
            created_at=now,
        )
    )

    batch = broker.drain()
    if include_unknown:
        batch.insert(
            1,
            Notification(
                delivery_id="demo-unknown",
                message="{}",
                attributes={EVENT_TYPE_ATTRIBUTE: "OrderShippedEvent"},
            ),
        )

    outbox = InMemoryOutbox()
    trail = InMemoryAuditTrail()
    coordinator = build_coordinator(config, outbox=outbox, trail=trail)
    result = await coordinator.process_batch(batch, budget)
    return result, outbox.pending_count, len(trail.records)


def demo_cmd(
    include_unknown: bool = typer.Option(
        False,
        "--unknown",
        help="Insert a notification with an unregistered event type.",
    ),
    budget: float = typer.Option(
        30.0,
        "--budget",
        "-b",
        help="Remaining invocation time in seconds.",
    ),
    log_level: str = typer.Option(config.log_level, "--log-level", help="Logging level."),
) -> None:
    """Publish sample events and process them through the consumer pipeline."""
    configure_logging(log_level)

    result, emails, audits = asyncio.run(_run_demo(include_unknown, budget))

    console.print(render_batch_result(result, title="eventrelay demo"))
    console.print(f"Emails queued: [bold]{emails}[/bold]  Audit records: [bold]{audits}[/bold]")

    if not result.succeeded:
        raise typer.Exit(code=1)
