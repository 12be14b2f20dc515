# ==============================================================================
# Session Store Abstract Base Class
# ==============================================================================
"""
Abstract interface for the document store holding session records.

Sessions are addressed as website -> fingerprint -> sessions. Containers are
created implicitly by the first session written under them.

Every write is conditional: it commits only if the state the caller based
its decision on still holds, and raises SessionConflict otherwise. Timestamps
are assigned from the store's clock, never the caller's.
"""

from abc import ABC, abstractmethod
from typing import Any

from sessioncollector.core.models import SessionRecord


class StoreError(Exception):
    """The store could not complete a read or write."""


class SessionConflict(Exception):
    """A conditional write found the session changed since it was read."""


class SessionStore(ABC):
    """
    Store for session records, keyed by website and fingerprint.

    Implementations must make each write atomic at the document level and
    check its precondition in the same atomic step.
    """

    @abstractmethod
    def latest_session(self, website: str, fingerprint: str) -> SessionRecord | None:
        """
        Get the most recent session (highest startedAt) for a fingerprint.

        Returns:
            SessionRecord, or None if the fingerprint has no sessions
        """
        ...

    @abstractmethod
    def get_session(self, website: str, fingerprint: str, session_id: str) -> SessionRecord | None:
        """
        Get one session by id.

        Returns:
            SessionRecord, or None if not found
        """
        ...

    @abstractmethod
    def create_session(
        self,
        website: str,
        fingerprint: str,
        *,
        api_key: Any,
        tiny_code: Any,
        items: list,
        expected_latest_id: str | None,
    ) -> SessionRecord:
        """
        Start a new open session.

        Args:
            website: Website partition name
            fingerprint: Normalized fingerprint
            api_key: Opaque tag stored verbatim
            tiny_code: Opaque tag stored verbatim
            items: Initial data items, stored as given
            expected_latest_id: Id of the latest session the caller saw, or None

        Returns:
            The created SessionRecord

        Raises:
            SessionConflict: If the latest session is no longer
                expected_latest_id, or is open
            StoreError: On store failure
        """
        ...

    @abstractmethod
    def append_to_session(
        self, website: str, fingerprint: str, session_id: str, items: list
    ) -> SessionRecord:
        """
        Append items to an open session and bump lastActivity.

        Items equal to one another within this call are added once.

        Raises:
            SessionConflict: If the session is missing or closed
            StoreError: On store failure
        """
        ...

    @abstractmethod
    def end_session(self, website: str, fingerprint: str, session_id: str) -> SessionRecord:
        """
        Close an open session, setting endedAt and lastActivity.

        Raises:
            SessionConflict: If the session is missing or already closed
            StoreError: On store failure
        """
        ...

    @abstractmethod
    def list_sessions(self, website: str, fingerprint: str, limit: int = 20) -> list[SessionRecord]:
        """
        List sessions for a fingerprint, most recent first.

        Args:
            limit: Maximum number of sessions to return
        """
        ...

    @abstractmethod
    def list_fingerprints(self, website: str) -> list[str]:
        """List fingerprints that have at least one session under a website."""
        ...

    @abstractmethod
    def list_websites(self) -> list[str]:
        """List websites that have at least one session."""
        ...

    @abstractmethod
    def ping(self) -> bool:
        """
        Check if the store is reachable.

        Returns:
            True if the store responds, False otherwise
        """
        ...
