"""Blog service: the single entry point used by the HTTP layer."""

from datetime import datetime
from datetime import timezone
from logging import getLogger
from typing import Optional

from fastapi_blogx.backends import BaseCacheBackend
from fastapi_blogx.backends import MemoryBackend
from fastapi_blogx.cache import CacheInvalidation
from fastapi_blogx.cache import CacheKeys
from fastapi_blogx.cache import CacheMonitor
from fastapi_blogx.cache import cached_function
from fastapi_blogx.config import Settings
from fastapi_blogx.config import get_settings
from fastapi_blogx.exceptions import InvalidSlugError
from fastapi_blogx.exceptions import PostNotFoundError
from fastapi_blogx.fallback import get_post_with_fallback
from fastapi_blogx.fallback import get_posts_with_fallback
from fastapi_blogx.fetcher import ResilientFetcher
from fastapi_blogx.models import BlogPost
from fastapi_blogx.models import ConnectionStatus
from fastapi_blogx.models import ServiceStates
from fastapi_blogx.models import SystemHealth
from fastapi_blogx.providers import ContentProvider
from fastapi_blogx.providers import NotionProvider
from fastapi_blogx.queue import RequestQueue
from fastapi_blogx.retry import RetryPolicy
from fastapi_blogx.slug import create_slug
from fastapi_blogx.slug import find_by_slug

logger = getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BlogService:
    """Posts from Notion with caching, retries and offline fallback.

    One instance is built at startup and shared; it owns the cache backend
    and the request queue.
    """

    def __init__(
        self,
        settings: Settings,
        provider: Optional[ContentProvider] = None,
        backend: Optional[BaseCacheBackend] = None,
        queue: Optional[RequestQueue] = None,
        policy: Optional[RetryPolicy] = None,
    ) -> None:
        self.settings = settings
        self.provider = provider
        self.backend = backend or MemoryBackend()
        self.queue = queue or RequestQueue(settings.queue_min_interval)
        self.fetcher = ResilientFetcher(
            self.backend, self.queue, policy or settings.retry_policy()
        )
        self.invalidation = CacheInvalidation(self.backend)
        self.monitor = CacheMonitor(self.backend)
        self.last_sync: Optional[str] = None
        self.last_error: Optional[str] = None

    @property
    def remote_configured(self) -> bool:
        return self.provider is not None

    async def _fetch_posts(self, force_refresh: bool = False) -> list[BlogPost]:
        try:
            posts = await self.fetcher.fetch(
                CacheKeys.BLOG_POSTS,
                self.provider.list_published,
                ttl=self.settings.blog_posts_ttl,
                context="list published posts",
                force_refresh=force_refresh,
            )
        except Exception as exc:
            self.last_error = str(exc)
            raise
        self.last_sync = _now()
        self.last_error = None
        return posts

    async def _fetch_post(self, slug: str) -> BlogPost:
        async def find_post() -> BlogPost:
            post = find_by_slug(await self._fetch_posts(), slug)
            if post is None:
                raise PostNotFoundError(f"Post not found: {create_slug(slug)}")
            return post

        return await cached_function(
            self.backend,
            CacheKeys.blog_post(create_slug(slug)),
            find_post,
            ttl=self.settings.blog_post_ttl,
        )

    async def get_posts(self, force_refresh: bool = False) -> list[BlogPost]:
        """All published posts, or the static set when Notion is unusable."""
        return await get_posts_with_fallback(
            lambda: self._fetch_posts(force_refresh),
            force_fallback=not self.remote_configured,
            build_phase=self.settings.fallback_always,
        )

    async def get_post(self, slug: str) -> BlogPost:
        """One post by slug.

        Raises:
            InvalidSlugError: If ``slug`` is empty
            PostNotFoundError: If Notion answered but has no such post
        """
        if not slug:
            raise InvalidSlugError("Slug is required")
        return await get_post_with_fallback(
            slug,
            lambda: self._fetch_post(slug),
            force_fallback=not self.remote_configured,
            build_phase=self.settings.fallback_always,
        )

    async def refresh_cache(self) -> list[BlogPost]:
        await self.invalidation.invalidate_blog_caches()
        return await self.get_posts(force_refresh=True)

    async def validate_connection(self) -> bool:
        if self.provider is None:
            return False
        return await self.queue.submit(self.provider.validate_connection)

    async def connection_status(self) -> ConnectionStatus:
        if self.provider is None:
            return ConnectionStatus(
                connected=False, error="Notion is not configured"
            )
        connected = await self.validate_connection()
        cached_posts = await self.backend.get_stale(CacheKeys.BLOG_POSTS)
        return ConnectionStatus(
            connected=connected,
            error=self.last_error,
            last_sync=self.last_sync,
            posts_count=len(cached_posts) if cached_posts is not None else None,
        )

    async def health(self) -> SystemHealth:
        """Connected means healthy; stale cached posts mean degraded."""
        connected = await self.validate_connection()
        if connected:
            status = "healthy"
        elif await self.backend.get_stale(CacheKeys.BLOG_POSTS) is not None:
            status = "degraded"
        else:
            status = "offline"
        return SystemHealth(
            status=status,
            services=ServiceStates(notion="online" if connected else "offline"),
            last_check=_now(),
            fallback_active=status == "offline",
        )

    async def close(self) -> None:
        if self.provider is not None:
            await self.provider.aclose()


def create_blog_service(settings: Optional[Settings] = None) -> BlogService:
    """Build the service from settings; without Notion credentials every
    request is served from the fallback set."""
    settings = settings or get_settings()
    provider = None
    if settings.notion_configured:
        provider = NotionProvider(
            settings.notion_token,
            settings.blog_index_id,
            base_url=settings.notion_api_url,
            notion_version=settings.notion_version,
            timeout=settings.notion_timeout,
        )
    else:
        logger.warning(
            "Notion CMS unavailable - missing NOTION_TOKEN or BLOG_INDEX_ID. "
            "Blog will use fallback content."
        )
    return BlogService(settings, provider=provider)
