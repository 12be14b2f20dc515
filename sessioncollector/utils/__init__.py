# ==============================================================================
# Session Collector Utilities
# ==============================================================================
"""
Shared utilities for the session collector.

This module exports configuration for use throughout the service.
"""

from sessioncollector.utils.config import (
    CollectorSettings,
    Settings,
    ValkeySettings,
    get_settings,
)

__all__ = [
    "CollectorSettings",
    "Settings",
    "ValkeySettings",
    "get_settings",
]
