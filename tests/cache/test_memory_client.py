"""Tests for the in-memory cache client."""

import asyncio
from collections.abc import AsyncGenerator

import pytest

from blog.clients.memory_client import MemoryClient


@pytest.fixture
async def memory_client() -> AsyncGenerator[MemoryClient]:
    """In-memory client with a short sweep interval, closed after the test."""
    client = MemoryClient(max_entries=3, cleanup_interval=1)
    await client.start_lifecycle()
    yield client
    await client.close()


@pytest.mark.asyncio
async def test_set_and_get(memory_client: MemoryClient) -> None:
    await memory_client.set("key", "value")
    assert await memory_client.get("key") == "value"


@pytest.mark.asyncio
async def test_get_non_existent(memory_client: MemoryClient) -> None:
    assert await memory_client.get("missing") is None


@pytest.mark.asyncio
async def test_delete_counts_removed_keys(memory_client: MemoryClient) -> None:
    await memory_client.set("a", "1")
    await memory_client.set("b", "2")

    assert await memory_client.delete("a", "b", "missing") == 2
    assert await memory_client.exists("a", "b") == 0


@pytest.mark.asyncio
async def test_ttl_and_expiration(memory_client: MemoryClient) -> None:
    await memory_client.set("key", "value", ex=1)
    assert await memory_client.get("key") == "value"
    await asyncio.sleep(1.1)
    assert await memory_client.get("key") is None


@pytest.mark.asyncio
async def test_incr_starts_from_zero(memory_client: MemoryClient) -> None:
    assert await memory_client.incr("counter") == 1
    assert await memory_client.incr("counter", 5) == 6
    assert await memory_client.get("counter") == "6"


@pytest.mark.asyncio
async def test_incr_rejects_non_integer(memory_client: MemoryClient) -> None:
    await memory_client.set("text", "abc")
    with pytest.raises(ValueError):
        await memory_client.incr("text")


@pytest.mark.asyncio
async def test_lru_eviction(memory_client: MemoryClient) -> None:
    """The least recently used key goes once ``max_entries`` is reached."""
    await memory_client.set("a", "1")
    await memory_client.set("b", "2")
    await memory_client.set("c", "3")
    await memory_client.get("a")  # a is now most recent
    await memory_client.set("d", "4")

    assert await memory_client.get("b") is None
    assert await memory_client.get("a") == "1"
    assert await memory_client.get("d") == "4"


@pytest.mark.asyncio
async def test_scan_iter_matches_glob(memory_client: MemoryClient) -> None:
    await memory_client.set("blog:posts:1", "x")
    await memory_client.set("blog:posts:2", "x")
    await memory_client.set("blog:other:1", "x")

    keys = [key async for key in memory_client.scan_iter("blog:posts:*")]

    assert sorted(keys) == ["blog:posts:1", "blog:posts:2"]


@pytest.mark.asyncio
async def test_background_sweep_removes_expired(memory_client: MemoryClient) -> None:
    await memory_client.set("key", "value", ex=1)
    await asyncio.sleep(2.2)

    info = await memory_client.info()
    assert info["total_keys"] == 0
