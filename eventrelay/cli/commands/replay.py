"""``eventrelay replay`` — process a saved SNS event file as one batch."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from eventrelay.cli.render import render_batch_result
from eventrelay.config import config
from eventrelay.logging_setup import configure_logging
from eventrelay.models.envelopes import parse_sns_event
from eventrelay.runtime import build_coordinator

console = Console()


def replay_cmd(
    event_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="JSON file holding an SNS-triggered invocation payload.",
    ),
    budget: float = typer.Option(
        30.0,
        "--budget",
        "-b",
        help="Remaining invocation time in seconds.",
    ),
    log_level: str = typer.Option(config.log_level, "--log-level", help="Logging level."),
) -> None:
    """Replay a captured SNS batch through the consumer pipeline.

    Exits with code 1 if any record fails, 2 if the file is unreadable.
    """
    configure_logging(log_level)

    try:
        payload = json.loads(event_file.read_text(encoding="utf-8"))
        notifications = parse_sns_event(payload)
    except (ValueError, AttributeError) as exc:
        console.print(f"[red]Cannot read SNS event from {event_file}:[/red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    coordinator = build_coordinator(config)
    result = asyncio.run(coordinator.process_batch(notifications, budget))

    console.print(render_batch_result(result, title=event_file.name))
    if not result.succeeded:
        for failure in result.failures:
            console.print(f"[red]-[/red] {escape(failure.describe())}")
        raise typer.Exit(code=1)
