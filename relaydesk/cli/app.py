"""Main Typer application — imports and registers all CLI commands.

Entry point: ``relaydesk`` (configured via pyproject.toml console scripts).
"""

from __future__ import annotations

import typer

from relaydesk.cli._runtime import configure_logging
from relaydesk.cli.commands.directory_cmd import (
    directory_cmd,
    evict_cmd,
    lookup_cmd,
    record_cmd,
)
from relaydesk.cli.commands.notify_cmd import broadcast_cmd, notify_cmd
from relaydesk.cli.commands.request_cmd import ingest_cmd, log_cmd, request_cmd
from relaydesk.config import RelaySettings

app = typer.Typer(
    name="relaydesk",
    help="relaydesk: address-gated Telegram notification relay.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Override RELAYDESK_LOG_LEVEL."
    ),
) -> None:
    """Configure logging before any command runs."""
    configure_logging(log_level or RelaySettings().log_level)


# Register subcommands
app.command(name="record", help="Record a user's delivery address.")(record_cmd)
app.command(name="lookup", help="Show a user's delivery address.")(lookup_cmd)
app.command(name="evict", help="Forget a user's delivery address.")(evict_cmd)
app.command(name="directory", help="List all known addresses.")(directory_cmd)
app.command(name="notify", help="Send a message to a user.")(notify_cmd)
app.command(name="broadcast", help="Send a message to all newsletter subscribers.")(
    broadcast_cmd
)
app.command(name="ingest", help="Apply a Telegram update to the directory.")(ingest_cmd)
app.command(name="request", help="Handle a Mini-App service request.")(request_cmd)
app.command(name="log", help="Show recent service requests.")(log_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
