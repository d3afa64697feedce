"""Tests for the Redis-backed cache and session-start store."""
import json
from datetime import datetime
from unittest.mock import MagicMock

import redis

from dreampuff.session.stores import RedisSessionStartStore
from dreampuff.utils.cache import CacheService


def test_cache_get_and_set():
    """Test values are namespaced and JSON encoded with a TTL."""
    client = MagicMock()
    client.get.return_value = json.dumps([{"id": "p1"}])
    cache = CacheService(client=client, ttl=60, enabled=True)

    assert cache.set("products", "all", [{"id": "p1"}]) is True
    client.setex.assert_called_once_with("dreampuff:products:all", 60, '[{"id": "p1"}]')
    assert cache.get("products", "all") == [{"id": "p1"}]


def test_cache_degrades_when_redis_is_down():
    """Test Redis errors become cache misses."""
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("down")
    client.setex.side_effect = redis.ConnectionError("down")
    client.delete.side_effect = redis.ConnectionError("down")
    client.ping.side_effect = redis.ConnectionError("down")
    cache = CacheService(client=client, ttl=60, enabled=True)

    assert cache.get("products", "all") is None
    assert cache.set("products", "all", []) is False
    assert cache.delete("products", "all") is False
    assert cache.ping() is False


def test_cache_disabled():
    """Test a disabled cache never touches Redis."""
    client = MagicMock()
    cache = CacheService(client=client, ttl=60, enabled=False)

    assert cache.get("products", "all") is None
    assert cache.set("products", "all", []) is False
    client.get.assert_not_called()
    client.setex.assert_not_called()


def test_redis_session_start_store():
    """Test the session start round-trips through a per-client key."""
    client = MagicMock()
    store = RedisSessionStartStore("tab-1", client=client)
    started = datetime(2026, 10, 19, 8, 0)

    store.set(started)
    client.set.assert_called_once_with("dreampuff:session_start:tab-1", started.isoformat())

    client.get.return_value = started.isoformat()
    assert store.get() == started

    store.clear()
    client.delete.assert_called_once_with("dreampuff:session_start:tab-1")


def test_redis_session_start_store_failures_read_as_missing():
    """Test unreadable or malformed values mean no recorded start."""
    client = MagicMock()
    store = RedisSessionStartStore("tab-1", client=client)

    client.get.side_effect = redis.ConnectionError("down")
    assert store.get() is None

    client.get.side_effect = None
    client.get.return_value = "not-a-date"
    assert store.get() is None
