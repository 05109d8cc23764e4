"""
Redis-backed key-value store.

Provides async Redis operations with:
- Connection pooling
- Graceful degradation on read failures (reads return None)
- Explicit StorageError on write failures
- Operation statistics
"""

import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from expense_gamification.exceptions import StorageError, wrap_storage_exception

logger = logging.getLogger(__name__)


class RedisKeyValueStore:
    """
    Async Redis key-value store.

    Values are stored as plain strings; serialization is the caller's job.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        enabled: bool = True,
        client: Optional[Any] = None,
    ):
        """
        Initialize Redis store.

        Args:
            redis_url: Redis connection URL
            enabled: Whether the store is enabled (allows runtime disable)
            client: Pre-built client (skips connect())
        """
        self.redis_url = redis_url
        self.enabled = enabled
        self._client: Optional[Any] = client
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "errors": 0,
        }

    async def connect(self) -> None:
        """Establish Redis connection."""
        if not self.enabled or self._client is not None:
            return

        try:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=10,
            )
            # Test connection
            await self._client.ping()
            logger.info(f"Redis connected: {self.redis_url}")
        except Exception as e:
            logger.error(f"Redis connection failed: {e}")
            logger.warning("Redis store disabled - profile will live in memory only")
            self.enabled = False
            self._client = None

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            try:
                await self._client.aclose()
                logger.info("Redis connection closed")
            except Exception as e:
                logger.error(f"Error closing Redis connection: {e}")
            finally:
                self._client = None

    async def get(self, key: str) -> Optional[str]:
        """
        Get value for key.

        Returns:
            Stored string or None if absent, disabled or on any error
        """
        if not self.enabled or not self._client:
            self._stats["misses"] += 1
            return None

        try:
            value = await self._client.get(key)
        except Exception as e:
            logger.error(f"Redis GET error for key '{key}': {e}")
            self._stats["errors"] += 1
            return None

        if value is None:
            self._stats["misses"] += 1
            logger.debug(f"Redis MISS: {key}")
            return None

        self._stats["hits"] += 1
        logger.debug(f"Redis HIT: {key}")
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        """
        Store value under key.

        Raises:
            StorageError: if disabled, not connected, or the write fails
        """
        if not self.enabled or not self._client:
            raise StorageError("Redis store is not connected", key=key, operation="set")

        try:
            await self._client.set(key, value)
        except Exception as e:
            self._stats["errors"] += 1
            raise wrap_storage_exception(e, "set", key) from e

        self._stats["sets"] += 1
        logger.debug(f"Redis SET: {key}")

    def get_stats(self) -> Dict[str, Any]:
        """Operation statistics with hit rate"""
        lookups = self._stats["hits"] + self._stats["misses"]
        hit_rate = (self._stats["hits"] / lookups * 100) if lookups else 0.0
        return {
            **self._stats,
            "hit_rate": round(hit_rate, 2),
            "enabled": self.enabled,
        }
