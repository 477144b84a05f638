"""Redis implementation of EntityStore.

Bodies are kept as plain string values under ``<prefix>:<locator>``.
It satisfies the EntityStore protocol through structural typing.
"""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from cortex_cache.config import get_redis_client, get_settings
from cortex_cache.errors import StorageError

logger = logging.getLogger(__name__)


class RedisEntityRepository:
    """Redis implementation using one key per entity body.

    This class satisfies the EntityStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        key_prefix: str | None = None,
    ) -> None:
        """Initialize the Redis entity repository.

        Args:
            redis_client: asyncio Redis client instance. If None, creates default.
            key_prefix: Namespace prepended to every locator.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = key_prefix or get_settings().key_prefix

    @classmethod
    def create(
        cls,
        redis_client: redis.Redis | None = None,
        key_prefix: str | None = None,
    ) -> "RedisEntityRepository":
        """Factory method to create RedisEntityRepository with defaults.

        Args:
            redis_client: asyncio Redis client. If None, built from settings.
            key_prefix: Key namespace. If None, uses settings.

        Returns:
            Configured RedisEntityRepository
        """
        return cls(redis_client=redis_client, key_prefix=key_prefix)

    def _key(self, locator: str) -> str:
        return f"{self._prefix}:{locator}"

    async def ping(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError) as e:
            logger.warning("Redis ping failed: %s", e)
            return False

    async def read(self, locator: str) -> bytes | None:
        """Read a body from Redis.

        Args:
            locator: The body locator

        Returns:
            The stored bytes, or None if the key does not exist
        """
        try:
            return await self._client.get(self._key(locator))
        except RedisError as e:
            raise StorageError(f"Redis read failed: {e}", locator=locator, operation="read") from e

    async def write(self, locator: str, payload: bytes) -> None:
        """Write a body to Redis.

        Args:
            locator: The body locator
            payload: Encoded body
        """
        try:
            await self._client.set(self._key(locator), payload)
        except RedisError as e:
            raise StorageError(f"Redis write failed: {e}", locator=locator, operation="write") from e

    def describe(self) -> dict:
        return {"backend": "redis", "key_prefix": self._prefix}

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
