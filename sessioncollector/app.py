# ==============================================================================
# Session Collector CLI
# ==============================================================================
"""
Command-line interface for the session collector.

Usage:
    sessioncollector --help
    sessioncollector serve
    sessioncollector status
    sessioncollector config show
    sessioncollector sessions websites
    sessioncollector sessions fingerprints example.com
    sessioncollector sessions list example.com 42
    sessioncollector sessions show example.com 42 <session-id>
"""

# ==============================================================================
# App Configuration
# ==============================================================================
# Set consistent terminal width for help output formatting
import os

import typer

if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="sessioncollector",
    help="Fingerprint session collector CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Serve command is imported from sessioncollector.cli.server
from sessioncollector.cli.server import serve

app.command("serve")(serve)

# Status command is imported from sessioncollector.cli.status
from sessioncollector.cli.status import show_status

app.command("status")(show_status)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

# Register config commands from cli.config module
from sessioncollector.cli.config import config_show

config_app.command("show")(config_show)

sessions_app = typer.Typer(
    help="Inspect stored sessions",
    no_args_is_help=True,
)
app.add_typer(sessions_app, name="sessions")

# Register session commands from cli.sessions module
from sessioncollector.cli.sessions import (
    sessions_fingerprints,
    sessions_list,
    sessions_show,
    sessions_websites,
)

sessions_app.command("websites")(sessions_websites)
sessions_app.command("fingerprints")(sessions_fingerprints)
sessions_app.command("list")(sessions_list)
sessions_app.command("show")(sessions_show)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
