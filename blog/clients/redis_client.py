"""Redis client module for cache operations."""

from collections.abc import AsyncGenerator
from logging import getLogger
from typing import Any

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from blog.configs import file_logger, pool_kwargs

logger = file_logger(getLogger(__name__))


class RedisClient:
    """
    Async Redis client wrapper with connection pooling.

    Every command failure is re-raised as ``redis.exceptions.ConnectionError``
    so ``CacheManager`` has a single error type to fall back on.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self.config = config or pool_kwargs
        self._pool: ConnectionPool | None = None
        self._redis: Redis | None = None

    async def connect(self) -> None:
        """Establish Redis connection pool."""
        try:
            self._pool = ConnectionPool(**self.config)
            self._redis = Redis(connection_pool=self._pool)
            if not await self._redis.ping():
                mssg = "Redis ping returned False"
                raise RedisConnectionError(mssg)
            logger.info("Redis connection successful. Cache is using Redis.")
        except RedisError as e:
            logger.exception("Failed to connect to Redis")
            mssg = f"Cannot connect to Redis at {self.config.get('host')}:{self.config.get('port')}"
            raise RedisConnectionError(mssg) from e

    async def disconnect(self) -> None:
        """Close Redis connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("Redis connection closed.")

    @property
    def client(self) -> Redis:
        if self._redis is None:
            mssg = "Redis client not initialized. Call connect() first."
            raise RuntimeError(mssg)
        return self._redis

    async def get(self, key: str) -> str | None:
        try:
            return await self.client.get(key)
        except RedisError as e:
            mssg = f"Cache get operation failed for key {key}: {e}"
            raise RedisConnectionError(mssg) from e

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        try:
            return bool(await self.client.set(key, value, ex=ex))
        except RedisError as e:
            mssg = f"Cache set operation failed for key {key}: {e}"
            raise RedisConnectionError(mssg) from e

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self.client.delete(*keys)
        except RedisError as e:
            mssg = f"Cache delete operation failed for keys {keys}: {e}"
            raise RedisConnectionError(mssg) from e

    async def exists(self, *keys: str) -> int:
        try:
            return await self.client.exists(*keys)
        except RedisError as e:
            mssg = f"Cache exists operation failed for keys {keys}: {e}"
            raise RedisConnectionError(mssg) from e

    async def incr(self, key: str, amount: int = 1) -> int:
        """Atomically increment ``key`` with INCRBY."""
        try:
            return await self.client.incrby(key, amount)
        except RedisError as e:
            mssg = f"Cache incr operation failed for key {key}: {e}"
            raise RedisConnectionError(mssg) from e

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            mssg = f"Cache ping operation failed: {e}"
            raise RedisConnectionError(mssg) from e

    async def info(self) -> dict[str, Any]:
        try:
            info = await self.client.info()
        except RedisError as e:
            mssg = f"Cache info operation failed: {e}"
            raise RedisConnectionError(mssg) from e
        return info if isinstance(info, dict) else {}

    async def scan_iter(self, pattern: str, count: int = 100) -> AsyncGenerator[str]:
        """Yield keys matching ``pattern`` using a SCAN cursor."""
        cursor = 0
        while True:
            try:
                cursor, keys = await self.client.scan(cursor, match=pattern, count=count)
            except RedisError as e:
                mssg = f"Cache scan_iter operation failed for pattern {pattern}: {e}"
                raise RedisConnectionError(mssg) from e
            for key in keys:
                yield key.decode("utf-8") if isinstance(key, bytes) else key
            if cursor == 0:
                break
