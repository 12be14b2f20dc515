# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the session collector CLI.
"""

import json
from typing import Annotated

import typer

from sessioncollector.cli.shared import C
from sessioncollector.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()

    # JSON output mode
    if json_output:
        config = {
            "collector": {
                "host": settings.collector.host,
                "port": settings.collector.port,
                "allowed_origins": settings.collector.allowed_origins,
                "strict_website_name": settings.collector.strict_website_name,
                "max_conflict_attempts": settings.collector.max_conflict_attempts,
            },
            "valkey": {
                "host": settings.valkey.host,
                "port": settings.valkey.port,
                "db": settings.valkey.db,
                "ssl_enabled": settings.valkey.ssl,
                "password": settings.valkey.password,
                "key_prefix": settings.valkey.key_prefix,
            },
            "log_level": settings.log_level,
            "debug": settings.debug,
        }
        print(json.dumps(config, indent=2))
        return

    # Human-readable output
    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    print(f"{C.CYAN}Collector{C.RESET}")
    print(f"  Listen:     {C.WHITE}{settings.collector.host}:{settings.collector.port}{C.RESET}")
    origins = ", ".join(settings.collector.allowed_origins) or "(none)"
    print(f"  Origins:    {C.WHITE}{origins}{C.RESET}")
    strict = "enabled" if settings.collector.strict_website_name else "disabled"
    print(f"  Strict:     {C.WHITE}{strict}{C.RESET}")
    print()

    print(f"{C.CYAN}Valkey{C.RESET}")
    print(f"  Host:       {C.WHITE}{settings.valkey.host}:{settings.valkey.port}{C.RESET}")
    print(f"  Database:   {C.WHITE}{settings.valkey.db}{C.RESET}")
    print(f"  SSL:        {C.WHITE}{'enabled' if settings.valkey.ssl else 'disabled'}{C.RESET}")
    print(f"  Prefix:     {C.WHITE}{settings.valkey.key_prefix}{C.RESET}")
    print()

    print(f"{C.CYAN}Logging{C.RESET}")
    print(f"  Level:      {C.WHITE}{settings.log_level}{C.RESET}")
    print()
