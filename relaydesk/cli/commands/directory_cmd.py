"""``relaydesk record / lookup / evict / directory`` — address directory commands."""

from __future__ import annotations

import typer
from rich.table import Table

from relaydesk.cli._runtime import console, open_relay


def record_cmd(
    user_id: str = typer.Argument(..., help="Telegram user id."),
    address: str = typer.Argument(..., help="Chat id the user can be reached at."),
) -> None:
    """Record (or replace) the delivery address for a user."""
    with open_relay() as relay:
        relay.record_address(user_id, address)
    console.print(f"[green]Recorded[/green] {user_id} -> {address}")


def lookup_cmd(
    user_id: str = typer.Argument(..., help="Telegram user id."),
) -> None:
    """Print the delivery address for a user.  Exits 1 if none is known."""
    with open_relay() as relay:
        address = relay.lookup_address(user_id)
    if address is None:
        console.print(f"[yellow]No address for[/yellow] {user_id}")
        raise typer.Exit(code=1)
    console.print(address)


def evict_cmd(
    user_id: str = typer.Argument(..., help="Telegram user id."),
) -> None:
    """Forget the delivery address for a user."""
    with open_relay() as relay:
        relay.evict_address(user_id)
    console.print(f"[green]Evicted[/green] {user_id}")


def directory_cmd() -> None:
    """List every known user address."""
    with open_relay() as relay:
        entries = relay.directory.list_entries()

    if not entries:
        console.print("[dim]Directory is empty.[/dim]")
        return

    table = Table(title="Address Directory")
    table.add_column("User", style="cyan")
    table.add_column("Address", style="green")
    table.add_column("Updated (UTC)", style="dim")
    for entry in entries:
        table.add_row(
            entry.user_id,
            entry.address,
            entry.updated_at.strftime("%Y-%m-%d %H:%M:%S"),
        )
    console.print(table)
