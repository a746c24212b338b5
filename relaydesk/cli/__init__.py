"""relaydesk CLI — Typer-based command-line interface.

Provides the ``relaydesk`` command with subcommands for managing the
address directory, sending notifications, ingesting Telegram updates and
handling Mini-App service requests.

All output uses Rich for formatted terminal display.
"""
