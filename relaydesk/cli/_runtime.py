"""Shared CLI runtime helpers: logging setup and Relay construction."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.logging import RichHandler

from relaydesk.config import RelaySettings
from relaydesk.core.relay import Relay

console = Console()


def configure_logging(level: str) -> None:
    """Route stdlib logging through Rich at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@contextmanager
def open_relay() -> Iterator[Relay]:
    """Yield a Relay built from the current environment, closing it on exit.

    Invalid arguments and an unusable channel configuration (both
    ``ValueError``) are reported in red and end the command with exit code 2.
    """
    try:
        with Relay(RelaySettings()) as relay:
            yield relay
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc
