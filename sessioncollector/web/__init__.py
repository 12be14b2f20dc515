# ==============================================================================
# HTTP Adapter
# ==============================================================================
"""
HTTP transport for the session collector.
"""

from sessioncollector.web.server import create_app

__all__ = ["create_app"]
