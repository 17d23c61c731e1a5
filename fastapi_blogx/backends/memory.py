import time
from collections.abc import Callable
from typing import Any
from typing import Optional

from fastapi_blogx.models import CacheEntryStats
from fastapi_blogx.models import CacheStats
from fastapi_blogx.types import CacheItem

from .base import BaseCacheBackend

DEFAULT_TTL = 3600


class MemoryBackend(BaseCacheBackend):
    """In-memory cache backend with stale reads.

    Expired entries are skipped by ``get`` but kept for ``get_stale`` until
    they are deleted, cleared, or purged by ``size``/``cleanup``. None of the
    methods await, so the backend is safe to share on a single event loop
    without a lock.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        default_ttl: float = DEFAULT_TTL,
    ) -> None:
        self.cache: dict[str, CacheItem] = {}
        self.clock = clock
        self.default_ttl = default_ttl

    async def get(self, key: str) -> Optional[Any]:
        cached_item = self.cache.get(key)
        if cached_item and cached_item.is_fresh(self.clock()):
            return cached_item.value
        return None

    async def get_stale(self, key: str) -> Optional[Any]:
        cached_item = self.cache.get(key)
        return cached_item.value if cached_item else None

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        self.cache[key] = CacheItem(
            value=value,
            stored_at=self.clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )

    async def delete(self, key: str) -> None:
        self.cache.pop(key, None)

    async def clear(self) -> None:
        self.cache.clear()

    async def keys(self) -> list[str]:
        return list(self.cache)

    async def size(self) -> int:
        await self.cleanup()
        return len(self.cache)

    async def cleanup(self) -> None:
        now = self.clock()
        expired_keys = [k for k, v in self.cache.items() if not v.is_fresh(now)]
        for key in expired_keys:
            self.cache.pop(key, None)

    async def get_stats(self) -> CacheStats:
        now = self.clock()
        items = [
            CacheEntryStats(
                key=key,
                age=item.age(now),
                ttl=item.ttl,
                remaining=item.ttl - item.age(now),
                expired=not item.is_fresh(now),
            )
            for key, item in self.cache.items()
        ]
        ages = [item.age for item in items]
        return CacheStats(
            total_size=len(items),
            items=items,
            oldest_item=max(ages, default=0.0),
            newest_item=min(ages, default=0.0),
        )
