# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- fakeredis-backed ValkeySessionStore instances
- SessionLifecycleManager wired to the fake store
- Clean Redis state per test (automatic flush)
"""

import fakeredis
import pytest

from sessioncollector.core.lifecycle import SessionLifecycleManager
from sessioncollector.infrastructure.session_store import ValkeySessionStore

TEST_PREFIX = "test"


@pytest.fixture()
def fake_redis():
    """A clean fakeredis instance for each test.

    Uses decode_responses=True to match the real Valkey client behavior.
    """
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture()
def store(fake_redis):
    """A ValkeySessionStore backed by fakeredis."""
    return ValkeySessionStore(client=fake_redis, key_prefix=TEST_PREFIX)


@pytest.fixture()
def manager(store):
    """A SessionLifecycleManager using the fake store."""
    return SessionLifecycleManager(store)
