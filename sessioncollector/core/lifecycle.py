# ==============================================================================
# Session Lifecycle Manager
# ==============================================================================
"""
Session lifecycle state machine.

For each normalized request the manager reads the most recent session of the
(website, fingerprint) entry and applies at most one transition:

    NONE   --start-new--> OPEN
    OPEN   --append-----> OPEN
    OPEN   --close------> CLOSED
    CLOSED --append-----> new record, OPEN
    CLOSED --close------> rejected (SessionAlreadyEnded)

Every write is conditional on the state the decision was based on. When a
concurrent request got there first the store raises SessionConflict and the
manager re-reads and decides again, so two requests cannot both open a
session for the same fingerprint. Store failures are never retried.
"""

import logging
from typing import Any

from sessioncollector.base.session_store import SessionConflict, SessionStore, StoreError
from sessioncollector.core.errors import NoActiveSession, SessionAlreadyEnded, StoreFailure
from sessioncollector.core.models import (
    Action,
    IngestRequest,
    Outcome,
    SessionEnded,
    SessionNotUpdated,
    SessionRecord,
    SessionUpdated,
)

logger = logging.getLogger(__name__)

STARTED_MESSAGE = "Started a new session and recorded data."
APPENDED_MESSAGE = "Added data to the existing active session."
ENDED_MESSAGE = "Session ended. Data stored in the session store."
NOT_UPDATED_MESSAGE = "Session not updated."


def has_data(data: Any) -> bool:
    """
    Whether a request carries data.

    None, False, 0 and "" count as no data; empty lists and objects count as
    data.
    """
    if data is None or data is False or data == "":
        return False
    if isinstance(data, (int, float)) and not isinstance(data, bool) and data == 0:
        return False
    return True


def as_items(data: Any) -> list:
    """A list is a batch of items; anything else is a single item."""
    return list(data) if isinstance(data, list) else [data]


class SessionLifecycleManager:
    """
    Applies lifecycle transitions against a SessionStore.

    Holds no per-request state; one instance serves every request of a
    process.
    """

    def __init__(self, store: SessionStore, max_conflict_attempts: int = 5):
        """
        Initialize the lifecycle manager.

        Args:
            store: Session store to read and write
            max_conflict_attempts: Decisions allowed per request before a
                persistent conflict is reported as a store failure
        """
        self.store = store
        self.max_conflict_attempts = max(1, max_conflict_attempts)

    def handle(self, request: IngestRequest) -> Outcome:
        """Resolve a normalized request."""
        return self.resolve(
            request.website_name,
            request.fingerprint,
            request.data,
            request.action,
            api_key=request.api_key,
            tiny_code=request.tiny_code,
        )

    def resolve(
        self,
        website: str,
        fingerprint: str,
        data: Any,
        action: Any,
        *,
        api_key: Any = None,
        tiny_code: Any = None,
    ) -> Outcome:
        """
        Decide and apply the transition for one request.

        Args:
            website: Website partition name
            fingerprint: Normalized fingerprint
            data: Item or batch of items to record
            action: "append", "end" or anything else
            api_key: Opaque tag stored on new sessions
            tiny_code: Opaque tag stored on new sessions

        Returns:
            SessionUpdated, SessionEnded or SessionNotUpdated

        Raises:
            NoActiveSession: Close requested with no session
            SessionAlreadyEnded: Close requested on a closed session
            StoreFailure: The store failed
        """
        try:
            if has_data(data) and (action is None or action == Action.APPEND):
                return self._with_conflict_retry(
                    lambda: self._append_or_start(website, fingerprint, data, api_key, tiny_code),
                    website,
                    fingerprint,
                )
            if action == Action.END:
                return self._with_conflict_retry(
                    lambda: self._close(website, fingerprint),
                    website,
                    fingerprint,
                )
        except StoreError as exc:
            logger.exception("Session store failure for %s/%s: %s", website, fingerprint, exc)
            raise StoreFailure(str(exc)) from exc

        return SessionNotUpdated(message=NOT_UPDATED_MESSAGE, fingerprint=fingerprint)

    # ==========================================================================
    # Transitions
    # ==========================================================================

    def _with_conflict_retry(self, decide, website: str, fingerprint: str) -> Outcome:
        """Re-run a read-decide-write step while concurrent writes win the race."""
        for attempt in range(1, self.max_conflict_attempts + 1):
            try:
                return decide()
            except SessionConflict as exc:
                logger.warning(
                    "Concurrent update on %s/%s (attempt %d/%d): %s",
                    website,
                    fingerprint,
                    attempt,
                    self.max_conflict_attempts,
                    exc,
                )
        raise StoreError(
            f"Gave up after {self.max_conflict_attempts} conflicting updates "
            f"on {website}/{fingerprint}"
        )

    def _append_or_start(
        self, website: str, fingerprint: str, data: Any, api_key: Any, tiny_code: Any
    ) -> SessionUpdated:
        latest = self.store.latest_session(website, fingerprint)
        items = as_items(data)

        if latest is None or not latest.is_open:
            session = self.store.create_session(
                website,
                fingerprint,
                api_key=api_key,
                tiny_code=tiny_code,
                items=items,
                expected_latest_id=latest.id if latest else None,
            )
            logger.info("Started session %s for %s/%s", session.id, website, fingerprint)
            return SessionUpdated(
                message=STARTED_MESSAGE, new_session_started=True, session_id=session.id
            )

        session = self.store.append_to_session(website, fingerprint, latest.id, items)
        logger.debug(
            "Appended %d item(s) to session %s for %s/%s",
            len(items),
            session.id,
            website,
            fingerprint,
        )
        return SessionUpdated(
            message=APPENDED_MESSAGE, new_session_started=False, session_id=session.id
        )

    def _close(self, website: str, fingerprint: str) -> SessionEnded:
        latest = self.store.latest_session(website, fingerprint)
        if latest is None:
            raise NoActiveSession()
        if not latest.is_open:
            raise SessionAlreadyEnded()

        self.store.end_session(website, fingerprint, latest.id)
        closed = self._read_back(website, fingerprint, latest.id)
        logger.info("Ended session %s for %s/%s", closed.id, website, fingerprint)
        return SessionEnded(message=ENDED_MESSAGE, session=closed)

    def _read_back(self, website: str, fingerprint: str, session_id: str) -> SessionRecord:
        session = self.store.get_session(website, fingerprint, session_id)
        if session is None:
            raise StoreError(f"Session {session_id} disappeared after it was closed")
        return session
