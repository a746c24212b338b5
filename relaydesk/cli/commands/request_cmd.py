"""``relaydesk ingest / request / log`` — feed updates and service requests.

Both ``ingest`` and ``request`` read a JSON document from a file (or ``-``
for stdin), the same body Telegram or the Mini App would POST.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
from rich.table import Table

from relaydesk.cli._runtime import console, open_relay


def _read_json(source: str) -> Any:
    try:
        text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
        return json.loads(text)
    except (OSError, json.JSONDecodeError) as exc:
        console.print(f"[bold red]Cannot read JSON from {source}:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


def ingest_cmd(
    update_file: str = typer.Argument(..., help="Telegram update JSON file, or '-'."),
) -> None:
    """Apply a Telegram update to the address directory."""
    update = _read_json(update_file)
    if not isinstance(update, dict):
        console.print("[bold red]Update must be a JSON object.[/bold red]")
        raise typer.Exit(code=2)

    with open_relay() as relay:
        event = relay.ingest_update(update)

    if event is None:
        console.print("[dim]Update ignored.[/dim]")
        return
    console.print(f"[green]{event.kind.value}[/green] {event.user_id} -> {event.address}")


def request_cmd(
    payload_file: str = typer.Argument(..., help="Service request JSON file, or '-'."),
) -> None:
    """Handle a Mini-App service request and print the JSON response."""
    payload = _read_json(payload_file)
    with open_relay() as relay:
        response = relay.handle_request(payload)

    console.print_json(json.dumps(response.to_json_dict()))
    if response.status != "success":
        raise typer.Exit(code=1)


def log_cmd(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of entries to show."),
) -> None:
    """Show the most recent service requests."""
    with open_relay() as relay:
        entries = relay.request_log.recent(limit)

    if not entries:
        console.print("[dim]No requests logged.[/dim]")
        return

    table = Table(title="Service Requests")
    table.add_column("Time (UTC)", style="dim")
    table.add_column("User", style="cyan")
    table.add_column("Name")
    table.add_column("Service")
    table.add_column("Status")
    for entry in entries:
        status = (
            f"[green]{entry.status}[/green]"
            if entry.status == "success"
            else f"[red]{entry.status}[/red]"
        )
        table.add_row(
            entry.timestamp_utc.strftime("%Y-%m-%d %H:%M:%S"),
            entry.user_id,
            entry.first_name,
            entry.service,
            status,
        )
    console.print(table)
