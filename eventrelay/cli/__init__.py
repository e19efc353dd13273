"""eventrelay CLI — Typer-based command-line interface.

Provides the ``eventrelay`` command with subcommands for running the demo
pipeline, replaying captured SNS batches, and listing event types.

All output uses Rich for formatted terminal display.
"""
