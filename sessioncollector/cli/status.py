# ==============================================================================
# Status Command
# ==============================================================================
"""
Status command for the session collector CLI.

Displays session store health in either formatted box output or JSON
format for programmatic consumption.

Includes light retry logic (3 attempts, ~7 seconds) for network resilience
when checking the store.
"""

import json as json_module
import logging
from typing import Annotated, Any

import typer
from redis.exceptions import RedisError

from sessioncollector.base.session_store import StoreError
from sessioncollector.cli.shared import (
    BOX_WIDTH,
    C,
    I,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _section_header_plain,
    get_session_store,
)
from sessioncollector.utils.config import get_settings
from sessioncollector.utils.retry import REDIS_RETRY_EXCEPTIONS, retry_light
from sessioncollector.utils.versions import get_collector_version

logger = logging.getLogger(__name__)


# ==============================================================================
# Data Collection
# ==============================================================================


def _collect_store_data() -> dict[str, Any]:
    """Collect session store status data."""
    settings = get_settings()
    result: dict[str, Any] = {
        "status": "unreachable",
        "host": settings.valkey.host,
        "port": settings.valkey.port,
        "key_prefix": settings.valkey.key_prefix,
        "websites": None,
    }

    store = get_session_store()

    @retry_light(REDIS_RETRY_EXCEPTIONS, logger)
    def _ping() -> bool:
        return bool(store.client.ping())

    try:
        if _ping():
            result["websites"] = len(store.list_websites())
            result["status"] = "connected"
    except (RedisError, StoreError) as exc:
        logger.debug("Session store unreachable: %s", exc)
    finally:
        store.close()

    return result


def collect_status_data() -> dict[str, Any]:
    """Collect all status data."""
    return {
        "version": get_collector_version(),
        "store": _collect_store_data(),
    }


# ==============================================================================
# Display Functions
# ==============================================================================


def _display_status(data: dict[str, Any]) -> None:
    """Display status in formatted box output."""
    W = BOX_WIDTH
    store = data["store"]

    print()
    print(_box_header("SESSION COLLECTOR STATUS", W))
    print(_empty_line(W))
    print(_box_line(f"  Version:  {C.WHITE}{data['version']}{C.RESET}", W))
    print(_empty_line(W))

    print(_section_header_plain("Session Store", W))
    print(_empty_line(W))
    endpoint = f"{store['host']}:{store['port']}"
    if store["status"] == "connected":
        print(_box_line(f"  {C.BRIGHT_GREEN}{I.CHECK}{C.RESET} {C.BOLD}Valkey{C.RESET}", W))
        print(_box_line(f"    Endpoint: {C.WHITE}{endpoint}{C.RESET}", W))
        print(_box_line(f"    Prefix:   {C.WHITE}{store['key_prefix']}{C.RESET}", W))
        print(_box_line(f"    Websites: {C.WHITE}{store['websites']:,}{C.RESET}", W))
    else:
        print(
            _box_line(
                f"  {C.BRIGHT_RED}{I.CROSS}{C.RESET} {C.BOLD}Valkey{C.RESET} {C.DIM}(unreachable){C.RESET}",
                W,
            )
        )
        print(_box_line(f"    Endpoint: {C.DIM}{endpoint}{C.RESET}", W))
    print(_empty_line(W))
    print(_box_bottom(W))
    print()


# ==============================================================================
# Command
# ==============================================================================


def show_status(
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output status as JSON")] = False,
) -> None:
    """Show session store health.

    Examples:
        sessioncollector status
        sessioncollector status --json
    """
    data = collect_status_data()

    if json_output:
        print(json_module.dumps(data, indent=2))
    else:
        _display_status(data)

    if data["store"]["status"] != "connected":
        raise typer.Exit(1)
