"""Cache manager on top of Redis with an in-memory fallback."""

from asyncio import Lock as AsyncLock
from collections import OrderedDict
from collections.abc import Callable, Coroutine
from logging import DEBUG, getLogger
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError

from blog.clients.memory_client import MemoryClient
from blog.clients.protocols import CacheClientProtocol
from blog.clients.redis_client import RedisClient
from blog.configs import CacheConfig, file_logger, settings
from blog.data import CacheStatistics
from blog.errors import (
    BASE_EXCEPTION,
    CacheExceptionError,
    CacheKeyError,
)
from blog.utils.cache_serializer import (
    compress,
    decompress,
    deserialize,
    do_compress,
    serialize,
)

logger = file_logger(getLogger(__name__))

CacheCallback = Callable[[], Coroutine[Any, Any, Any]]

CACHE_FAILURES = (RedisConnectionError, ValueError, CacheExceptionError, *BASE_EXCEPTION)


class CacheManager:
    """
    Namespaced cache with JSON serialization and optional compression.

    Features:
        - Keys built as ``{prefix}:{namespace}:{key}``
        - Automatic fallback to the in-memory client when Redis is unreachable,
          at startup or at runtime
        - Request coalescing in ``get_or_set`` (one loader per key at a time)
        - Atomic counters via ``incr``
        - Statistics tracking
    """

    MAX_LOCKS: int = 10_000

    def __init__(
        self,
        redis_client: RedisClient | None = None,
        memory_client: MemoryClient | None = None,
        cache_config: CacheConfig | None = None,
        *,
        redis_enabled: bool | None = None,
    ) -> None:
        self.redis_client = redis_client or RedisClient()
        self.memory_client = memory_client or MemoryClient()
        self.cache_config = cache_config or CacheConfig()
        self.redis_enabled = settings.REDIS_ENABLED if redis_enabled is None else redis_enabled
        self._client: CacheClientProtocol = self.memory_client
        self.is_redis_available = False
        self.statistics = CacheStatistics()
        self._locks: OrderedDict[str, AsyncLock] = OrderedDict()

    async def initialize(self) -> None:
        """Connect to Redis, falling back to the in-memory cache when it is down or disabled."""
        if self.redis_enabled:
            try:
                await self.redis_client.connect()
                self._client = self.redis_client
                self.is_redis_available = True
                logger.info("Cache manager initialized with Redis.")
                return
            except RedisConnectionError as e:
                logger.warning(f"Redis connection failed: {e}. Falling back to in-memory cache.")
        else:
            logger.info("Redis disabled. Using in-memory cache.")

        self._client = self.memory_client
        self.is_redis_available = False
        await self.memory_client.start_lifecycle()
        logger.info("Cache manager initialized with in-memory cache.")

    async def shutdown(self) -> None:
        """Close the active clients."""
        if self.is_redis_available:
            await self.redis_client.disconnect()
        await self.memory_client.close()
        logger.info("Cache manager shutdown successfully.")

    @property
    def backend(self) -> str:
        return "redis" if self.is_redis_available else "in-memory"

    def _build_key(self, key: str, namespace: str | None = None) -> str:
        """Build full cache key with prefix and namespace."""
        prefix = self.cache_config.key_prefix
        return f"{prefix}:{namespace}:{key}" if namespace else f"{prefix}:{key}"

    async def _fallback_to_memory(self) -> None:
        """Switch to the in-memory client after a Redis failure at runtime."""
        if self.is_redis_available:
            logger.warning("Redis connection lost. Falling back to in-memory cache.")
            self._client = self.memory_client
            self.is_redis_available = False
            await self.memory_client.start_lifecycle()

    async def _fail(self, operation: str, key: object, exc: Exception) -> CacheKeyError:
        self.statistics.record_error()
        if isinstance(exc, RedisConnectionError):
            await self._fallback_to_memory()
        logger.warning("Cache %s failed for %s: %s", operation, key, exc)
        return CacheKeyError(f"Cache {operation} failed for {key}")

    async def get(self, key: str, namespace: str | None = None) -> Any | None:
        """
        Get a value from the cache.

        Returns:
            The deserialized value, or None on a miss.

        Raises:
            CacheKeyError: If the backend or deserialization fails.
        """
        full_key = self._build_key(key, namespace)
        try:
            if logger.isEnabledFor(DEBUG):
                logger.debug("Getting from cache: %s", full_key)
            cached_value = await self._client.get(full_key)
            if cached_value is None:
                self.statistics.record_miss()
                return None
            self.statistics.record_hit(len(cached_value.encode("utf-8")))
            return deserialize(decompress(cached_value))
        except CACHE_FAILURES as e:
            raise await self._fail("get", full_key, e) from e

    async def set(
        self,
        key: str,
        value: object,
        ttl: int | None = None,
        namespace: str | None = None,
    ) -> bool:
        """
        Store a value, serialized as JSON and compressed past the threshold.

        The TTL defaults to ``default_ttl`` and is capped at ``max_ttl``.
        """
        full_key = self._build_key(key, namespace)
        try:
            serialized = serialize(value)
            if self.cache_config.compression_enabled and do_compress(
                serialized,
                self.cache_config.compression_threshold,
            ):
                serialized = compress(serialized)

            ex = ttl if ttl is not None else self.cache_config.default_ttl
            ex = min(ex, self.cache_config.max_ttl)

            success = await self._client.set(full_key, serialized, ex=ex)
            self.statistics.record_set(len(serialized.encode("utf-8")))
        except CACHE_FAILURES as e:
            raise await self._fail("set", full_key, e) from e
        return success

    async def delete(self, *keys: str, namespace: str | None = None) -> int:
        """Delete keys from cache."""
        full_keys = [self._build_key(key, namespace) for key in keys]
        try:
            deleted_count = await self._client.delete(*full_keys)
        except CACHE_FAILURES as e:
            raise await self._fail("delete", full_keys, e) from e
        if deleted_count:
            self.statistics.record_delete()
        return deleted_count

    async def exists(self, *keys: str, namespace: str | None = None) -> int:
        """Count how many of ``keys`` exist."""
        full_keys = [self._build_key(key, namespace) for key in keys]
        try:
            return await self._client.exists(*full_keys)
        except CACHE_FAILURES as e:
            raise await self._fail("exists", full_keys, e) from e

    async def incr(self, key: str, amount: int = 1, namespace: str | None = None) -> int:
        """
        Atomically increment a counter stored under ``key``.

        Counters are stored raw (not JSON-encoded) and never expire, so
        they must be read back with ``get_counter`` rather than ``get``.
        """
        full_key = self._build_key(key, namespace)
        try:
            value = await self._client.incr(full_key, amount)
        except CACHE_FAILURES as e:
            raise await self._fail("incr", full_key, e) from e
        self.statistics.record_increment()
        return value

    async def get_counter(self, key: str, namespace: str | None = None) -> int:
        """Read a counter written by ``incr``; missing counters read as 0."""
        full_key = self._build_key(key, namespace)
        try:
            raw = await self._client.get(full_key)
            return int(raw) if raw is not None else 0
        except CACHE_FAILURES as e:
            raise await self._fail("get_counter", full_key, e) from e

    def _get_or_create_lock(self, key: str) -> AsyncLock:
        """Return the per-key lock, evicting the least recently used past ``MAX_LOCKS``."""
        if key in self._locks:
            self._locks.move_to_end(key)
            return self._locks[key]
        while len(self._locks) >= self.MAX_LOCKS:
            self._locks.popitem(last=False)
        lock = self._locks[key] = AsyncLock()
        return lock

    async def get_or_set(
        self,
        key: str,
        callback: CacheCallback,
        ttl: int | None = None,
        namespace: str | None = None,
    ) -> Any:
        """
        Return the cached value for ``key`` or compute, store and return it.

        Concurrent misses on the same key run ``callback`` once. Cache
        failures never fail the read: the callback result is returned as is.
        """
        full_key = self._build_key(key, namespace)

        try:
            cached = await self.get(key, namespace)
        except CacheKeyError:
            cached = None
        if cached is not None:
            return cached

        async with self._get_or_create_lock(full_key):
            try:
                cached = await self.get(key, namespace)
            except CacheKeyError:
                cached = None
            if cached is not None:
                return cached

            value = await callback()
            try:
                await self.set(key, value, ttl, namespace)
            except CacheKeyError:
                logger.warning("Could not cache value for %s", full_key)
            return value

    async def clear(self, namespace: str | None = None) -> int:
        """
        Delete every key under ``namespace`` (or under the prefix).

        Deletion is batched so large keyspaces are not loaded at once.
        """
        prefix = self.cache_config.key_prefix
        pattern = f"{prefix}:{namespace}:*" if namespace else f"{prefix}:*"
        deleted_total = 0
        batch: list[str] = []
        try:
            async for key in self._client.scan_iter(pattern):
                batch.append(key)
                if len(batch) >= 1000:
                    deleted_total += await self._client.delete(*batch)
                    batch = []
            if batch:
                deleted_total += await self._client.delete(*batch)
        except CACHE_FAILURES as e:
            raise await self._fail("clear", pattern, e) from e

        if deleted_total:
            self.statistics.record_delete()
            logger.info("Cleared %d keys for pattern '%s'.", deleted_total, pattern)
        return deleted_total

    async def health_check(self) -> dict[str, Any]:
        """
        Perform a health check.

        Returns:
            Dictionary with backend, status and statistics.
        """
        result: dict[str, Any] = {
            "backend": self.backend,
            "statistics": self.get_statistics(),
        }
        try:
            result["status"] = "healthy" if await self._client.ping() else "unhealthy"
            result["info"] = {
                k: v
                for k, v in (await self._client.info()).items()
                if k in ("server", "redis_version", "total_keys", "used_memory_human")
            }
        except CACHE_FAILURES as e:
            result["status"] = "unhealthy"
            result["error"] = str(e)
        return result

    def get_statistics(self) -> dict[str, int | str]:
        return self.statistics.to_dict()
