"""``relaydesk notify / broadcast`` — send messages through the relay."""

from __future__ import annotations

import typer

from relaydesk.cli._runtime import console, open_relay

_STATUS_HINTS = {
    "no_address": "user has not started a conversation with the bot",
    "invalid_address": "chat is gone; address evicted",
    "channel_error": "channel failed; address kept",
}


def notify_cmd(
    user_id: str = typer.Argument(..., help="Telegram user id."),
    message: str = typer.Argument(..., help="Message text."),
) -> None:
    """Deliver one message to a user.  Exits 1 if it was not delivered."""
    with open_relay() as relay:
        result = relay.notify(user_id, message)

    if result.delivered:
        console.print(f"[green]Delivered[/green] to {user_id}")
        return

    hint = _STATUS_HINTS.get(result.status.value, result.status.value)
    console.print(f"[yellow]Not delivered[/yellow] to {user_id}: {hint}")
    raise typer.Exit(code=1)


def broadcast_cmd(
    message: str = typer.Argument(..., help="Newsletter text."),
) -> None:
    """Send a newsletter message to every subscriber."""
    with open_relay() as relay:
        results = relay.broadcast_newsletter(message)

    delivered = sum(1 for r in results.values() if r.delivered)
    console.print(
        f"[bold]Newsletter:[/bold] {delivered}/{len(results)} subscribers reached"
    )
