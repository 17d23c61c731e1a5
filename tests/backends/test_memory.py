import pytest

from fastapi_blogx.backends.memory import MemoryBackend
from fastapi_blogx.models import BlogPost


@pytest.mark.asyncio
async def test_memory_backend_set_get(memory_backend: MemoryBackend):
    key = "notion:blog-posts"
    value = [
        BlogPost(id="page-1", title="First", date="2025-01-01", slug="first"),
    ]

    await memory_backend.set(key, value, 60)
    retrieved_value = await memory_backend.get(key)

    assert retrieved_value == value


@pytest.mark.asyncio
async def test_memory_backend_get_nonexistent_key(memory_backend: MemoryBackend):
    assert await memory_backend.get("nonexistent_key") is None
    assert await memory_backend.get_stale("nonexistent_key") is None


@pytest.mark.asyncio
async def test_memory_backend_set_overwrites(memory_backend: MemoryBackend):
    await memory_backend.set("key", "old", 60)
    await memory_backend.set("key", "new", 60)

    assert await memory_backend.get("key") == "new"


@pytest.mark.asyncio
async def test_memory_backend_default_ttl(clock):
    backend = MemoryBackend(clock=clock, default_ttl=10)
    await backend.set("key", "value")

    clock.advance(10)
    assert await backend.get("key") == "value"

    clock.advance(0.5)
    assert await backend.get("key") is None


@pytest.mark.asyncio
async def test_memory_backend_delete(memory_backend: MemoryBackend):
    await memory_backend.set("test_key", "value", 60)
    await memory_backend.delete("test_key")

    assert await memory_backend.get("test_key") is None
    assert await memory_backend.get_stale("test_key") is None


@pytest.mark.asyncio
async def test_memory_backend_clear(memory_backend: MemoryBackend):
    await memory_backend.set("test_key1", "value1", 60)
    await memory_backend.set("test_key2", "value2", 60)
    await memory_backend.clear()

    assert await memory_backend.get("test_key1") is None
    assert await memory_backend.get_stale("test_key2") is None
    assert await memory_backend.keys() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("ttl", [1, 60, 3600])
async def test_memory_backend_ttl_expiry_keeps_stale(memory_backend, clock, ttl):
    await memory_backend.set("key", "value", ttl)

    clock.advance(ttl)
    assert await memory_backend.get("key") == "value"
    assert await memory_backend.has("key")

    clock.advance(1)
    assert await memory_backend.get("key") is None
    assert not await memory_backend.has("key")
    assert await memory_backend.get_stale("key") == "value"


@pytest.mark.asyncio
async def test_memory_backend_get_does_not_evict(memory_backend, clock):
    await memory_backend.set("key", "value", 1)
    clock.advance(5)

    await memory_backend.get("key")
    await memory_backend.get("key")

    assert await memory_backend.keys() == ["key"]


@pytest.mark.asyncio
async def test_memory_backend_size_purges_expired(memory_backend, clock):
    await memory_backend.set("short", "value1", 1)
    await memory_backend.set("long", "value2", 60)
    clock.advance(2)

    assert await memory_backend.size() == 1
    assert await memory_backend.get_stale("short") is None
    assert await memory_backend.get("long") == "value2"


@pytest.mark.asyncio
async def test_memory_backend_stats(memory_backend, clock):
    await memory_backend.set("old", "value1", 5)
    clock.advance(10)
    await memory_backend.set("new", "value2", 60)
    clock.advance(1)

    stats = await memory_backend.get_stats()

    assert stats.total_size == 2
    assert stats.oldest_item == 11
    assert stats.newest_item == 1
    by_key = {item.key: item for item in stats.items}
    assert by_key["old"].expired is True
    assert by_key["old"].remaining == -6
    assert by_key["new"].expired is False
    # Stats are read-only
    assert await memory_backend.get_stale("old") == "value1"


@pytest.mark.asyncio
async def test_memory_backend_stats_empty(memory_backend):
    stats = await memory_backend.get_stats()

    assert stats.total_size == 0
    assert stats.items == []
    assert stats.oldest_item == 0
    assert stats.newest_item == 0
