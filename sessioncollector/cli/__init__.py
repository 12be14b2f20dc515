# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for the session collector.

Commands are organized into separate modules for maintainability:
- shared.py: Common utilities, constants, and helpers
- server.py: serve command running the HTTP collector
- status.py: Status command showing store health
- config.py: Configuration display
- sessions.py: Read-only session inspection
"""

from sessioncollector.cli.shared import (
    BOX_WIDTH,
    B,
    Box,
    C,
    Colors,
    I,
    Icons,
    get_session_store,
)

__all__ = [
    "BOX_WIDTH",
    "B",
    "Box",
    "C",
    "Colors",
    "I",
    "Icons",
    "get_session_store",
]
