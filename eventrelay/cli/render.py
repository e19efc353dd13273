"""Rich rendering of batch results for the CLI."""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from eventrelay.models.results import BatchResult, RouteStatus

_STATUS_LABELS: dict[RouteStatus, str] = {
    RouteStatus.SUCCEEDED: "[green]SUCCEEDED[/green]",
    RouteStatus.SKIPPED: "[yellow]SKIPPED[/yellow]",
    RouteStatus.FAILED: "[bold red]FAILED[/bold red]",
}


def render_batch_result(result: BatchResult, *, title: str = "Batch Result") -> Panel:
    """Render one row per notification plus a summary line."""
    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("Delivery ID", style="cyan", overflow="fold")
    table.add_column("Event Type", no_wrap=True)
    table.add_column("Status", justify="center", no_wrap=True)
    table.add_column("Detail", style="dim")

    for outcome in result.outcomes:
        detail = ""
        if outcome.failure is not None:
            detail = outcome.failure.kind.value
            if outcome.failure.handler_errors:
                detail += ": " + ", ".join(e.handler for e in outcome.failure.handler_errors)
            elif outcome.failure.message:
                detail += f": {outcome.failure.message}"
        table.add_row(
            escape(outcome.delivery_id),
            escape(outcome.type_tag),
            _STATUS_LABELS[outcome.status],
            escape(detail),
        )

    border = "green" if result.succeeded else "red"
    return Panel(
        table,
        title=f"[bold]{title}[/bold]",
        subtitle=result.summary() if result.succeeded else f"{len(result.failures)} failed",
        border_style=border,
    )
