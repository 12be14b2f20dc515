# ==============================================================================
# Infrastructure Implementations
# ==============================================================================
"""
Concrete implementations of the base interfaces.

Available implementations:
- ValkeySessionStore: Valkey/Redis document store for session records
"""

from sessioncollector.infrastructure.session_store import (
    ValkeySessionStore,
    get_valkey_client,
)

__all__ = [
    "ValkeySessionStore",
    "get_valkey_client",
]
