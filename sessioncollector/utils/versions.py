# ==============================================================================
# Version Utilities
# ==============================================================================
"""
Utilities for retrieving package versions.
"""

from importlib.metadata import version, PackageNotFoundError


def get_collector_version() -> str:
    """
    Get the session-collector package version.

    Returns:
        Version string (e.g., "0.1.0")
    """
    try:
        return version("session-collector")
    except PackageNotFoundError:
        return "0.1.0"
