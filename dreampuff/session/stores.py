import logging
from datetime import datetime
from typing import Optional, Protocol

import redis

from dreampuff.utils.cache import redis_client

logger = logging.getLogger(__name__)


class SessionStartStore(Protocol):
    """Client-local record of when the current user last signed in."""

    def get(self) -> Optional[datetime]: ...

    def set(self, value: datetime) -> None: ...

    def clear(self) -> None: ...


class MemorySessionStartStore:
    """Process-local store, for single-process clients and tests."""

    def __init__(self, value: Optional[datetime] = None):
        self._value = value

    def get(self) -> Optional[datetime]:
        return self._value

    def set(self, value: datetime) -> None:
        self._value = value

    def clear(self) -> None:
        self._value = None


class RedisSessionStartStore:
    """
    Session start kept in Redis under a per-client key.

    A read failure is reported as "no recorded start", which makes the
    lifecycle controller force a fresh sign-in.
    """

    KEY_PREFIX = "dreampuff:session_start"

    def __init__(self, client_id: str, client: redis.Redis = None):
        self.client = client or redis_client
        self.key = f"{self.KEY_PREFIX}:{client_id}"

    def get(self) -> Optional[datetime]:
        try:
            raw = self.client.get(self.key)
        except redis.RedisError as e:
            logger.error(f"Could not read session start for {self.key}: {e}")
            return None
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logger.warning(f"Discarding malformed session start {raw!r} for {self.key}")
            return None

    def set(self, value: datetime) -> None:
        try:
            self.client.set(self.key, value.isoformat())
        except redis.RedisError as e:
            logger.error(f"Could not record session start for {self.key}: {e}")

    def clear(self) -> None:
        try:
            self.client.delete(self.key)
        except redis.RedisError as e:
            logger.error(f"Could not clear session start for {self.key}: {e}")
