"""In-memory cache client for fallback when Redis is not available."""

from asyncio import CancelledError, Lock, Task, create_task
from asyncio import sleep as asyncio_sleep
from collections import OrderedDict
from collections.abc import AsyncGenerator
from contextlib import suppress
from fnmatch import fnmatch
from logging import getLogger
from time import monotonic

from blog.configs import file_logger

logger = file_logger(getLogger(__name__))


class MemoryClient:
    """
    Asynchronous in-memory cache client that mimics ``RedisClient``.

    Features:
        - LRU eviction once ``max_entries`` is reached
        - Per-key TTL, checked lazily on access and by a background sweep
        - Atomic integer counters via ``incr``
        - Glob-style key scanning
    """

    DEFAULT_MAX_ENTRIES: int = 50_000
    DEFAULT_CLEANUP_INTERVAL: int = 60  # seconds

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        cleanup_interval: int = DEFAULT_CLEANUP_INTERVAL,
    ) -> None:
        """
        Initialize the MemoryClient.

        Args:
            max_entries: Maximum number of cache entries before LRU eviction.
            cleanup_interval: Interval in seconds for background cleanup.
        """
        self._cache: OrderedDict[str, str] = OrderedDict()
        self._expires_at: dict[str, float] = {}
        self._max_entries = max_entries
        self._cleanup_interval = cleanup_interval
        self._cleanup_task: Task[None] | None = None
        self._lock = Lock()
        self.is_connected: bool = True

    async def start_lifecycle(self) -> None:
        """Start the background expiry sweep."""
        async with self._lock:
            self.is_connected = True
            if not self._cleanup_task:
                self._cleanup_task = create_task(self._cleanup_loop())
                logger.info("MemoryClient active expiration task started.")

    async def _cleanup_loop(self) -> None:
        while self.is_connected:
            try:
                await asyncio_sleep(self._cleanup_interval)
                async with self._lock:
                    expired = [k for k in self._expires_at if self._is_expired(k)]
                    self._drop(*expired)
                if expired:
                    logger.debug("Memory cleanup: removed %d expired keys.", len(expired))
            except CancelledError:
                break

    def _is_expired(self, key: str) -> bool:
        deadline = self._expires_at.get(key)
        return deadline is not None and monotonic() > deadline

    def _drop(self, *keys: str) -> int:
        """Remove keys without taking the lock."""
        count = 0
        for key in keys:
            if self._cache.pop(key, None) is not None:
                count += 1
            self._expires_at.pop(key, None)
        return count

    def _live(self, key: str) -> bool:
        if self._is_expired(key):
            self._drop(key)
            return False
        return key in self._cache

    def _store(self, key: str, value: str) -> None:
        if key not in self._cache:
            while len(self._cache) >= self._max_entries:
                oldest, _ = self._cache.popitem(last=False)
                self._expires_at.pop(oldest, None)
        self._cache[key] = value
        self._cache.move_to_end(key)

    async def get(self, key: str) -> str | None:
        """Get a value from the cache."""
        async with self._lock:
            if not self._live(key):
                return None
            self._cache.move_to_end(key)
            return self._cache[key]

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        """Set a value with optional TTL; like Redis SET, a plain set clears any TTL."""
        async with self._lock:
            self._store(key, value)
            if ex:
                self._expires_at[key] = monotonic() + ex
            else:
                self._expires_at.pop(key, None)
            return True

    async def delete(self, *keys: str) -> int:
        """Delete one or more keys from the cache."""
        async with self._lock:
            return self._drop(*keys)

    async def exists(self, *keys: str) -> int:
        """Count how many of ``keys`` exist."""
        async with self._lock:
            return sum(1 for key in keys if self._live(key))

    async def incr(self, key: str, amount: int = 1) -> int:
        """
        Increment an integer value, starting from 0 when the key is missing.

        The key's TTL, if any, is preserved.

        Raises:
            ValueError: If the stored value is not an integer.
        """
        async with self._lock:
            current = int(self._cache[key]) if self._live(key) else 0
            new_value = current + amount
            self._store(key, str(new_value))
            return new_value

    async def ping(self) -> bool:
        return self.is_connected

    async def info(self) -> dict[str, str | int]:
        async with self._lock:
            return {
                "server": "In-Memory Cache",
                "total_keys": len(self._cache),
                "max_entries": self._max_entries,
            }

    async def scan_iter(
        self,
        pattern: str,
        count: int = 100,  # noqa: ARG002 - kept for API compatibility with RedisClient
    ) -> AsyncGenerator[str]:
        """Yield live keys matching a glob-style ``pattern``."""
        async with self._lock:
            keys = [k for k in self._cache if not self._is_expired(k)]
        for key in keys:
            if fnmatch(key, pattern):
                yield key

    async def close(self) -> None:
        """Stop the client and its cleanup task."""
        self.is_connected = False
        if self._cleanup_task:
            self._cleanup_task.cancel()
            with suppress(CancelledError):
                await self._cleanup_task
            self._cleanup_task = None
