"""Tests for the cache-aside helpers, invalidation and monitoring."""

import logging

import pytest
import pytest_asyncio

from fastapi_blogx.cache import CacheInvalidation
from fastapi_blogx.cache import CacheKeys
from fastapi_blogx.cache import CacheMonitor
from fastapi_blogx.cache import cached_function
from fastapi_blogx.cache import preload_cache


class CountingProducer:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class TestCachedFunction:
    @pytest.mark.asyncio
    async def test_second_call_is_a_cache_hit(self, memory_backend):
        producer = CountingProducer(["a"], ["b"])

        first = await cached_function(memory_backend, "key", producer, ttl=60)
        second = await cached_function(memory_backend, "key", producer, ttl=60)

        assert first == second == ["a"]
        assert producer.calls == 1

    @pytest.mark.asyncio
    async def test_expired_entry_is_refetched(self, memory_backend, clock):
        producer = CountingProducer("a", "b")

        await cached_function(memory_backend, "key", producer, ttl=60)
        clock.advance(61)
        result = await cached_function(memory_backend, "key", producer, ttl=60)

        assert result == "b"
        assert producer.calls == 2
        assert await memory_backend.get("key") == "b"

    @pytest.mark.asyncio
    async def test_force_refresh_skips_fresh_entry(self, memory_backend):
        producer = CountingProducer("a", "b")

        await cached_function(memory_backend, "key", producer, ttl=60)
        result = await cached_function(
            memory_backend, "key", producer, ttl=60, force_refresh=True
        )

        assert result == "b"
        assert producer.calls == 2

    @pytest.mark.asyncio
    async def test_stale_value_returned_when_producer_fails(
        self, memory_backend, clock, caplog
    ):
        await memory_backend.set("key", "stale-value", 60)
        clock.advance(120)
        producer = CountingProducer(RuntimeError("upstream down"))

        with caplog.at_level(logging.WARNING, logger="fastapi_blogx.cache"):
            result = await cached_function(memory_backend, "key", producer, ttl=60)

        assert result == "stale-value"
        assert producer.calls == 1
        assert "returning stale cache" in caplog.text

    @pytest.mark.asyncio
    async def test_stale_value_returned_on_forced_refresh_failure(self, memory_backend):
        await memory_backend.set("key", "cached", 60)
        producer = CountingProducer(RuntimeError("upstream down"))

        result = await cached_function(
            memory_backend, "key", producer, ttl=60, force_refresh=True
        )

        assert result == "cached"

    @pytest.mark.asyncio
    async def test_failure_without_cache_propagates(self, memory_backend):
        error = RuntimeError("upstream down")
        producer = CountingProducer(error)

        with pytest.raises(RuntimeError) as exc_info:
            await cached_function(memory_backend, "key", producer, ttl=60)

        assert exc_info.value is error
        assert await memory_backend.get_stale("key") is None

    @pytest.mark.asyncio
    async def test_sync_producer(self, memory_backend):
        result = await cached_function(memory_backend, "key", lambda: 42, ttl=60)

        assert result == 42
        assert await memory_backend.get("key") == 42


class TestCacheKeys:
    def test_keys(self):
        assert CacheKeys.BLOG_POSTS == "notion:blog-posts"
        assert CacheKeys.blog_post("hello") == "notion:blog-post:hello"
        assert CacheKeys.database_schema("db") == "notion:schema:db"
        assert CacheKeys.page_content("p1") == "notion:page:p1"


class TestCacheInvalidation:
    @pytest_asyncio.fixture
    async def populated(self, memory_backend):
        await preload_cache(memory_backend, CacheKeys.BLOG_POSTS, ["post"], 600)
        await preload_cache(memory_backend, CacheKeys.blog_post("a"), "a", 600)
        await preload_cache(memory_backend, CacheKeys.page_content("p1"), "page", 600)
        await preload_cache(memory_backend, "other:key", "other", 600)
        return memory_backend

    @pytest.mark.asyncio
    async def test_invalidate_key(self, populated):
        await CacheInvalidation(populated).invalidate_key(CacheKeys.BLOG_POSTS)

        assert await populated.get_stale(CacheKeys.BLOG_POSTS) is None
        assert await populated.get(CacheKeys.blog_post("a")) == "a"

    @pytest.mark.asyncio
    async def test_invalidate_blog_caches(self, populated):
        removed = await CacheInvalidation(populated).invalidate_blog_caches()

        assert removed == 2
        assert sorted(await populated.keys()) == ["notion:page:p1", "other:key"]

    @pytest.mark.asyncio
    async def test_invalidate_all_notion(self, populated):
        removed = await CacheInvalidation(populated).invalidate_all_notion()

        assert removed == 3
        assert await populated.keys() == ["other:key"]

    @pytest.mark.asyncio
    async def test_clear_all(self, populated):
        await CacheInvalidation(populated).clear_all()

        assert await populated.keys() == []


class TestCacheMonitor:
    @pytest.mark.asyncio
    async def test_log_stats(self, memory_backend, clock, caplog):
        await memory_backend.set("key", "value", 60)
        clock.advance(5)

        with caplog.at_level(logging.INFO, logger="fastapi_blogx.cache"):
            stats = await CacheMonitor(memory_backend).log_stats()

        assert stats.total_size == 1
        assert stats.items[0].remaining == 55
        assert "Cache statistics: 1 items" in caplog.text
