"""Protocol definitions for cache client implementations."""

from collections.abc import AsyncIterator, Awaitable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheClientProtocol(Protocol):
    """
    Interface shared by ``RedisClient`` and ``MemoryClient``.

    Values are always strings; serialization happens one level up in
    ``CacheManager``.
    """

    def get(self, key: str) -> Awaitable[str | None]: ...

    def set(self, key: str, value: str, ex: int | None = None) -> Awaitable[bool]: ...

    def delete(self, *keys: str) -> Awaitable[int]: ...

    def exists(self, *keys: str) -> Awaitable[int]: ...

    def incr(self, key: str, amount: int = 1) -> Awaitable[int]:
        """Atomically increment an integer counter, creating it at 0 if missing."""
        ...

    def ping(self) -> Awaitable[bool]: ...

    def info(self) -> Awaitable[dict[str, Any]]: ...

    def scan_iter(self, pattern: str, count: int = 100) -> AsyncIterator[str]: ...
