# ==============================================================================
# Session Inspection Commands
# ==============================================================================
"""
Read-only commands for inspecting stored sessions.

Lists websites, fingerprints and sessions held in the session store and
shows a single session document. Nothing here writes to the store.
"""

import json as _json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from sessioncollector.base.session_store import StoreError
from sessioncollector.cli.shared import C, I, get_session_store
from sessioncollector.core.models import SessionRecord


# ==============================================================================
# Helper Functions
# ==============================================================================


def _fail(message: str) -> None:
    print(f"\n  {C.BRIGHT_RED}{I.CROSS} {message}{C.RESET}\n")
    raise typer.Exit(1)


def _format_time(record: SessionRecord, field: str) -> str:
    value = getattr(record, field)
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"


def _print_names(title: str, names: list[str], json_output: bool) -> None:
    if json_output:
        print(_json.dumps(names))
        return
    if not names:
        print(f"\n  {C.BRIGHT_YELLOW}{I.WARN} No {title.lower()} found{C.RESET}\n")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Name")
    for name in names:
        table.add_row(name)
    print()
    Console().print(table)
    print()


# ==============================================================================
# Commands
# ==============================================================================


def sessions_websites(
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """List websites that have recorded sessions."""
    store = get_session_store()
    try:
        websites = store.list_websites()
    except StoreError as exc:
        _fail(f"Session store error: {exc}")
    finally:
        store.close()
    _print_names("Websites", websites, json_output)


def sessions_fingerprints(
    website: Annotated[str, typer.Argument(help="Website name")],
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """List fingerprints with sessions under a website."""
    store = get_session_store()
    try:
        fingerprints = store.list_fingerprints(website)
    except StoreError as exc:
        _fail(f"Session store error: {exc}")
    finally:
        store.close()
    _print_names("Fingerprints", fingerprints, json_output)


def sessions_list(
    website: Annotated[str, typer.Argument(help="Website name")],
    fingerprint: Annotated[str, typer.Argument(help="Visitor fingerprint")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum sessions to show")] = 20,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """List sessions for a fingerprint, most recent first.

    Examples:
        sessioncollector sessions list example.com 42
        sessioncollector sessions list example.com 42 --limit 5 --json
    """
    store = get_session_store()
    try:
        sessions = store.list_sessions(website, fingerprint, limit=limit)
    except StoreError as exc:
        _fail(f"Session store error: {exc}")
    finally:
        store.close()

    if json_output:
        print(_json.dumps([s.to_response() for s in sessions], indent=2))
        return

    if not sessions:
        print(
            f"\n  {C.BRIGHT_YELLOW}{I.WARN} No sessions for fingerprint "
            f"'{fingerprint}' on '{website}'{C.RESET}\n"
        )
        return

    table = Table(
        title=f"Sessions: {website} / {fingerprint}",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Session ID")
    table.add_column("State")
    table.add_column("Started")
    table.add_column("Last activity")
    table.add_column("Ended")
    table.add_column("Items", justify="right")

    for session in sessions:
        table.add_row(
            session.id,
            "open" if session.is_open else "closed",
            _format_time(session, "started_at"),
            _format_time(session, "last_activity"),
            _format_time(session, "ended_at"),
            f"{len(session.data_batches):,}",
        )

    print()
    Console().print(table)
    print()


def sessions_show(
    website: Annotated[str, typer.Argument(help="Website name")],
    fingerprint: Annotated[str, typer.Argument(help="Visitor fingerprint")],
    session_id: Annotated[str, typer.Argument(help="Session ID")],
) -> None:
    """Show one session document as JSON."""
    store = get_session_store()
    try:
        session = store.get_session(website, fingerprint, session_id)
    except StoreError as exc:
        _fail(f"Session store error: {exc}")
    finally:
        store.close()

    if session is None:
        _fail(f"Session '{session_id}' not found")
    print(_json.dumps(session.to_response(), indent=2))
