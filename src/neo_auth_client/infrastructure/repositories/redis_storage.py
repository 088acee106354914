"""Redis local storage."""

import logging
from typing import Optional

from redis import Redis
from redis.exceptions import RedisError

from ...core.exceptions import StorageError

logger = logging.getLogger(__name__)


class RedisLocalStorage:
    """Storage backed by a Redis server.

    Handles ONLY byte persistence in Redis, for server-side processes that
    keep one auth client per user. The client is used synchronously; the
    session manager runs storage calls in a worker thread.
    """

    def __init__(self, redis_client: Redis, key_prefix: str = "neo_auth"):
        """Initialize Redis storage.

        Args:
            redis_client: redis-py client instance
            key_prefix: Prefix for every key written
        """
        if redis_client is None:
            raise ValueError("Redis client is required")
        self.redis = redis_client
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "neo_auth") -> "RedisLocalStorage":
        """Build storage from a redis:// URL."""
        return cls(Redis.from_url(url), key_prefix=key_prefix)

    def _make_key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def get(self, key: str) -> Optional[bytes]:
        try:
            value = self.redis.get(self._make_key(key))
        except RedisError as e:
            logger.error(f"Redis get failed for {key}: {e}")
            raise StorageError(f"Failed to read {key}: {e}", key=key) from e
        if value is None:
            return None
        return value.encode("utf-8") if isinstance(value, str) else value

    def set(self, key: str, value: bytes) -> None:
        try:
            self.redis.set(self._make_key(key), value)
        except RedisError as e:
            logger.error(f"Redis set failed for {key}: {e}")
            raise StorageError(f"Failed to write {key}: {e}", key=key) from e

    def remove(self, key: str) -> None:
        try:
            self.redis.delete(self._make_key(key))
        except RedisError as e:
            logger.error(f"Redis delete failed for {key}: {e}")
            raise StorageError(f"Failed to remove {key}: {e}", key=key) from e
