from abc import ABC
from abc import abstractmethod
from typing import Any
from typing import Optional

from fastapi_blogx.models import CacheStats


class BaseCacheBackend(ABC):
    """Base class for all cache backends."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Retrieve a value if it is still fresh."""

    @abstractmethod
    async def get_stale(self, key: str) -> Optional[Any]:
        """Retrieve a value regardless of its freshness."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store a value in the cache."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a value from the cache."""

    @abstractmethod
    async def clear(self) -> None:
        """Clear all cached values."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """List every stored key, fresh or stale."""

    @abstractmethod
    async def size(self) -> int:
        """Count the fresh entries."""

    @abstractmethod
    async def get_stats(self) -> CacheStats:
        """Return a diagnostic snapshot of the cache."""

    async def has(self, key: str) -> bool:
        return await self.get(key) is not None
