"""Main Typer application — imports and registers all CLI commands.

Entry point: ``eventrelay`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import typer

from eventrelay.cli.commands.demo import demo_cmd
from eventrelay.cli.commands.replay import replay_cmd

app = typer.Typer(
    name="eventrelay",
    help="eventrelay: typed domain events from publisher to side-effect handlers.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="demo", help="Publish sample events and process them as one batch.")(demo_cmd)
app.command(name="replay", help="Process a saved SNS event file as one batch.")(replay_cmd)


@app.command(name="types", help="List the event types the router handles.")
def types_cmd() -> None:
    """Print every registered type tag with its wire fields."""
    from rich.console import Console
    from rich.table import Table

    from eventrelay.routing.router import ROUTING_TABLE

    table = Table(title="Registered Event Types")
    table.add_column("Type Tag", style="cyan")
    table.add_column("Fields")
    for tag, route in sorted(ROUTING_TABLE.items()):
        fields = ", ".join(
            info.alias or name for name, info in route.event_type.model_fields.items()
        )
        table.add_row(tag, fields)
    Console().print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
