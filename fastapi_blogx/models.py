"""Pydantic models shared by the service and the HTTP routes."""

from typing import Literal

from pydantic import BaseModel
from pydantic import Field

FALLBACK_ID_PREFIX = "fallback-"


class BlogPost(BaseModel):
    """A blog post, either sourced from Notion or from the static fallback set."""

    id: str
    title: str
    description: str = ""
    date: str
    slug: str
    author: str = "Anonymous"
    published: bool = True
    content: str = ""
    tags: list[str] = Field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return self.id.startswith(FALLBACK_ID_PREFIX)


class CacheEntryStats(BaseModel):
    key: str
    age: float = Field(description="Seconds since the entry was stored")
    ttl: float
    remaining: float = Field(description="Seconds until expiry (negative once stale)")
    expired: bool


class CacheStats(BaseModel):
    """Diagnostic snapshot of a cache backend."""

    total_size: int
    items: list[CacheEntryStats] = Field(default_factory=list)
    oldest_item: float = 0.0
    newest_item: float = 0.0


class ConnectionStatus(BaseModel):
    connected: bool
    error: str | None = None
    last_sync: str | None = None
    posts_count: int | None = None


class ServiceStates(BaseModel):
    notion: Literal["online", "offline", "slow"] = "online"
    cache: Literal["online", "offline"] = "online"


class SystemHealth(BaseModel):
    status: Literal["healthy", "degraded", "offline"] = "healthy"
    services: ServiceStates = Field(default_factory=ServiceStates)
    last_check: str
    fallback_active: bool = False
