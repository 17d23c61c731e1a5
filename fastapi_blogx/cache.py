import inspect
from collections.abc import Callable
from logging import getLogger
from typing import Any
from typing import TypeVar

from fastapi_blogx.backends import BaseCacheBackend
from fastapi_blogx.models import CacheStats

T = TypeVar("T")

logger = getLogger(__name__)

NOTION_PREFIX = "notion:"
BLOG_PREFIX = "notion:blog"


class CacheKeys:
    """Cache keys and TTLs (seconds) for each kind of Notion data."""

    BLOG_POSTS = "notion:blog-posts"
    BLOG_POSTS_TTL = 600

    BLOG_POST_TTL = 7200
    DATABASE_SCHEMA_TTL = 3600
    PAGE_CONTENT_TTL = 3600

    @staticmethod
    def blog_post(slug: str) -> str:
        return f"notion:blog-post:{slug}"

    @staticmethod
    def database_schema(database_id: str) -> str:
        return f"notion:schema:{database_id}"

    @staticmethod
    def page_content(page_id: str) -> str:
        return f"notion:page:{page_id}"


async def get_response(func: Callable, *args: Any, **kwargs: Any) -> Any:
    """Call the producer, awaiting it when it is a coroutine function."""
    if inspect.iscoroutinefunction(func):
        return await func(*args, **kwargs)
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result


async def cached_function(
    backend: BaseCacheBackend,
    cache_key: str,
    producer: Callable[[], Any],
    ttl: float = 3600,
    force_refresh: bool = False,
) -> Any:
    """Cache-aside read with stale fallback.

    A fresh entry is returned without calling ``producer``. Otherwise the
    producer runs and its result is stored. If the producer raises, the stale
    entry for ``cache_key`` is returned when one exists; the original error is
    re-raised when it does not.
    """
    if not force_refresh:
        cached = await backend.get(cache_key)
        if cached is not None:
            logger.debug("Cache HIT for key: %s", cache_key)
            return cached

    logger.debug("Cache MISS for key: %s - fetching fresh data", cache_key)

    try:
        fresh = await get_response(producer)
    except Exception as exc:
        stale = await backend.get_stale(cache_key)
        if stale is not None:
            logger.warning(
                "Error fetching fresh data for %s, returning stale cache: %r",
                cache_key,
                exc,
            )
            return stale
        raise

    await backend.set(cache_key, fresh, ttl=ttl)
    logger.info("Cached data for key: %s (TTL: %ss)", cache_key, ttl)
    return fresh


async def preload_cache(
    backend: BaseCacheBackend, cache_key: str, value: Any, ttl: float = 3600
) -> None:
    """Warm the cache with a known value."""
    await backend.set(cache_key, value, ttl=ttl)
    logger.info("Preloaded cache for key: %s", cache_key)


class CacheInvalidation:
    """Explicit removal helpers over a backend."""

    def __init__(self, backend: BaseCacheBackend) -> None:
        self.backend = backend

    async def invalidate_key(self, key: str) -> None:
        await self.backend.delete(key)
        logger.info("Invalidated cache key: %s", key)

    async def invalidate_prefix(self, prefix: str) -> int:
        removed = 0
        for key in await self.backend.keys():
            if key.startswith(prefix):
                await self.backend.delete(key)
                removed += 1
        return removed

    async def invalidate_blog_caches(self) -> int:
        removed = await self.invalidate_prefix(BLOG_PREFIX)
        logger.info("Invalidated %d blog cache entries", removed)
        return removed

    async def invalidate_all_notion(self) -> int:
        removed = await self.invalidate_prefix(NOTION_PREFIX)
        logger.info("Invalidated %d Notion cache entries", removed)
        return removed

    async def clear_all(self) -> None:
        await self.backend.clear()
        logger.info("Cleared all caches")


class CacheMonitor:
    """Observability helpers over a backend."""

    def __init__(self, backend: BaseCacheBackend) -> None:
        self.backend = backend

    async def get_stats(self) -> CacheStats:
        return await self.backend.get_stats()

    async def log_stats(self) -> CacheStats:
        stats = await self.get_stats()
        logger.info(
            "Cache statistics: %d items, oldest %ds, newest %ds",
            stats.total_size,
            round(stats.oldest_item),
            round(stats.newest_item),
        )
        for item in stats.items:
            logger.debug(
                "  %s: age %ds, remaining %ds",
                item.key,
                round(item.age),
                round(item.remaining),
            )
        return stats
