# ==============================================================================
# Session Store Implementation (Valkey/Redis)
# ==============================================================================
"""
Valkey/Redis implementation of the SessionStore interface.

Session records are stored as JSON documents. Each fingerprint keeps a sorted
set of its session ids scored by startedAt, which gives the "most recent
session" query in a single ZREVRANGE. Website and fingerprint index sets are
written together with a fingerprint's first session.

Key layout ({p} is the configured key prefix; website and fingerprint are
percent-encoded):
- {p}:websites                                  -> Set of website names
- {p}:site:{website}:fingerprints               -> Set of fingerprints
- {p}:site:{website}:fp:{fingerprint}:sessions  -> Sorted set id -> startedAt
- {p}:site:{website}:fp:{fingerprint}:session:{id} -> JSON document

Writes are optimistic transactions (WATCH/MULTI/EXEC). A watched key changing
before EXEC aborts the write and surfaces as SessionConflict. Timestamps come
from the server's TIME command as microseconds since the epoch and are kept
strictly increasing within a fingerprint.
"""

import json
import logging
import uuid
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import redis
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, WatchError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.retry import Retry

from sessioncollector.base.session_store import SessionConflict, SessionStore, StoreError
from sessioncollector.core.models import SessionRecord
from sessioncollector.utils.config import get_settings
from sessioncollector.utils.retry import VALKEY_RETRIES

logger = logging.getLogger(__name__)


def get_valkey_client(url: str | None = None, socket_timeout: int | None = None) -> redis.Redis:
    """
    Get a Valkey/Redis client connection.

    Configured with:
    - Socket timeouts for fast failure detection
    - Automatic retries with exponential backoff for transient failures
    - Health check interval to keep connections alive

    Args:
        url: Valkey/Redis connection URL. If None, uses settings.
        socket_timeout: Socket timeout in seconds. If None, uses settings.

    Returns:
        redis.Redis client instance
    """
    settings = get_settings()
    url = url or settings.valkey.url
    timeout = socket_timeout if socket_timeout is not None else settings.valkey.socket_timeout

    # Configure retry with exponential backoff for transient failures
    retry = Retry(ExponentialBackoff(cap=32, base=1), retries=VALKEY_RETRIES)

    return redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
        retry=retry,
        retry_on_error=[RedisTimeoutError, RedisConnectionError],
        health_check_interval=30,
    )


def union_items(items: list) -> list:
    """
    Drop items equal to an earlier item in the same list, keeping order.

    Equality is by canonical JSON, so dicts with the same content match
    regardless of key order.
    """
    seen: set[str] = set()
    unique = []
    for item in items:
        marker = json.dumps(item, sort_keys=True)
        if marker not in seen:
            seen.add(marker)
            unique.append(item)
    return unique


class ValkeySessionStore(SessionStore):
    """
    Valkey/Redis implementation of SessionStore.

    Each session document holds:
    - id: Session identifier (uuid4 hex)
    - apiKey, tinyCode: Opaque caller tags
    - startedAt, lastActivity: Server timestamps (µs)
    - endedAt: Server timestamp (µs), null while open
    - dataBatches: JSON array of recorded items
    """

    def __init__(self, client: redis.Redis | None = None, key_prefix: str | None = None):
        """
        Initialize the session store.

        Args:
            client: Redis client instance. If None, creates a new connection.
            key_prefix: Prefix for all keys. If None, uses settings.
        """
        self._client = client or get_valkey_client()
        self._prefix = key_prefix or get_settings().valkey.key_prefix

    @property
    def client(self) -> redis.Redis:
        """Get the underlying Redis client."""
        return self._client

    # ==========================================================================
    # Key Helpers
    # ==========================================================================

    def _websites_key(self) -> str:
        return f"{self._prefix}:websites"

    def _site_key(self, website: str) -> str:
        if not isinstance(website, str) or not website:
            raise StoreError(f"Website name must be a non-empty string, got {website!r}")
        return f"{self._prefix}:site:{quote(website, safe='')}"

    def _fingerprints_key(self, website: str) -> str:
        return f"{self._site_key(website)}:fingerprints"

    def _entry_key(self, website: str, fingerprint: str) -> str:
        return f"{self._site_key(website)}:fp:{quote(fingerprint, safe='')}"

    def _index_key(self, website: str, fingerprint: str) -> str:
        return f"{self._entry_key(website, fingerprint)}:sessions"

    def _session_key(self, website: str, fingerprint: str, session_id: str) -> str:
        return f"{self._entry_key(website, fingerprint)}:session:{session_id}"

    # ==========================================================================
    # Internal Helpers
    # ==========================================================================

    @staticmethod
    def _decode(key: str, value: str | None) -> dict | None:
        """Decode a stored JSON document."""
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Corrupt session document at {key}") from exc

    @staticmethod
    def _server_time(pipe) -> int:
        """Read the server clock in microseconds."""
        seconds, micros = pipe.time()
        return int(seconds) * 1_000_000 + int(micros)

    def _read(self, operation: Callable[[], Any]) -> Any:
        """Run a read, translating client errors into StoreError."""
        try:
            return operation()
        except RedisError as exc:
            raise StoreError(str(exc)) from exc

    def _transact(self, watch_keys: list[str], body: Callable[[Any], Any]) -> Any:
        """
        Run an optimistic transaction.

        The body reads in immediate mode, calls pipe.multi(), queues its
        writes and calls pipe.execute(). If a watched key changes first,
        the write is discarded and SessionConflict is raised.
        """
        with self._client.pipeline() as pipe:
            try:
                pipe.watch(*watch_keys)
                return body(pipe)
            except WatchError as exc:
                raise SessionConflict("Session changed during write") from exc
            except RedisError as exc:
                raise StoreError(str(exc)) from exc

    # ==========================================================================
    # SessionStore Interface Implementation
    # ==========================================================================

    def latest_session(self, website: str, fingerprint: str) -> SessionRecord | None:
        index_key = self._index_key(website, fingerprint)
        ids = self._read(lambda: self._client.zrevrange(index_key, 0, 0))
        if not ids:
            return None
        return self.get_session(website, fingerprint, ids[0])

    def get_session(self, website: str, fingerprint: str, session_id: str) -> SessionRecord | None:
        key = self._session_key(website, fingerprint, session_id)
        document = self._decode(key, self._read(lambda: self._client.get(key)))
        if document is None:
            return None
        return SessionRecord.from_document(document)

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
        index_key = self._index_key(website, fingerprint)
        session_id = uuid.uuid4().hex
        new_key = self._session_key(website, fingerprint, session_id)

        def body(pipe) -> dict:
            ids = pipe.zrevrange(index_key, 0, 0)
            latest_id = ids[0] if ids else None
            if latest_id != expected_latest_id:
                raise SessionConflict(f"Latest session is now {latest_id}")

            floor = 0
            if latest_id is not None:
                latest_key = self._session_key(website, fingerprint, latest_id)
                pipe.watch(latest_key)
                latest = self._decode(latest_key, pipe.get(latest_key))
                if latest is None or latest.get("endedAt") is None:
                    raise SessionConflict(f"Session {latest_id} is still open")
                floor = latest["startedAt"] + 1

            now = max(self._server_time(pipe), floor)
            document = {
                "id": session_id,
                "apiKey": api_key,
                "tinyCode": tiny_code,
                "startedAt": now,
                "lastActivity": now,
                "endedAt": None,
                "dataBatches": list(items),
            }

            pipe.multi()
            pipe.set(new_key, json.dumps(document))
            pipe.zadd(index_key, {session_id: now})
            pipe.sadd(self._websites_key(), website)
            pipe.sadd(self._fingerprints_key(website), fingerprint)
            pipe.execute()
            return document

        document = self._transact([index_key], body)
        logger.debug("Created session %s under %s/%s", session_id, website, fingerprint)
        return SessionRecord.from_document(document)

    def append_to_session(
        self, website: str, fingerprint: str, session_id: str, items: list
    ) -> SessionRecord:
        key = self._session_key(website, fingerprint, session_id)

        def body(pipe) -> dict:
            document = self._decode(key, pipe.get(key))
            if document is None or document.get("endedAt") is not None:
                raise SessionConflict(f"Session {session_id} is not open")

            document["lastActivity"] = max(
                self._server_time(pipe), document["lastActivity"] + 1
            )
            document["dataBatches"].extend(union_items(items))

            pipe.multi()
            pipe.set(key, json.dumps(document))
            pipe.execute()
            return document

        return SessionRecord.from_document(self._transact([key], body))

    def end_session(self, website: str, fingerprint: str, session_id: str) -> SessionRecord:
        key = self._session_key(website, fingerprint, session_id)

        def body(pipe) -> dict:
            document = self._decode(key, pipe.get(key))
            if document is None or document.get("endedAt") is not None:
                raise SessionConflict(f"Session {session_id} is not open")

            now = max(self._server_time(pipe), document["lastActivity"] + 1)
            document["endedAt"] = now
            document["lastActivity"] = now

            pipe.multi()
            pipe.set(key, json.dumps(document))
            pipe.execute()
            return document

        return SessionRecord.from_document(self._transact([key], body))

    def list_sessions(self, website: str, fingerprint: str, limit: int = 20) -> list[SessionRecord]:
        if limit <= 0:
            return []
        index_key = self._index_key(website, fingerprint)
        ids = self._read(lambda: self._client.zrevrange(index_key, 0, limit - 1))
        if not ids:
            return []

        keys = [self._session_key(website, fingerprint, sid) for sid in ids]
        values = self._read(lambda: self._client.mget(keys))
        sessions = []
        for key, value in zip(keys, values):
            document = self._decode(key, value)
            if document is not None:
                sessions.append(SessionRecord.from_document(document))
        return sessions

    def list_fingerprints(self, website: str) -> list[str]:
        key = self._fingerprints_key(website)
        return sorted(self._read(lambda: self._client.smembers(key)))

    def list_websites(self) -> list[str]:
        return sorted(self._read(lambda: self._client.smembers(self._websites_key())))

    # ==========================================================================
    # Additional Methods (beyond ABC)
    # ==========================================================================

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except RedisError:
            return False

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
