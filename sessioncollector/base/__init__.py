# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes defining the contracts between the session lifecycle
and its storage backend.
"""

from sessioncollector.base.session_store import SessionConflict, SessionStore, StoreError

__all__ = [
    "SessionConflict",
    "SessionStore",
    "StoreError",
]
