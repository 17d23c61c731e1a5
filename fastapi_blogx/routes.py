"""JSON routes exposing blog posts, cache state and health."""

from logging import getLogger

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi import Query
from pydantic import BaseModel
from pydantic import Field

from fastapi_blogx.cache import NOTION_PREFIX
from fastapi_blogx.dependencies import BlogServiceDep
from fastapi_blogx.exceptions import InvalidSlugError
from fastapi_blogx.exceptions import PostNotFoundError
from fastapi_blogx.fallback import has_fallback_content
from fastapi_blogx.models import BlogPost
from fastapi_blogx.models import CacheStats
from fastapi_blogx.models import ConnectionStatus
from fastapi_blogx.models import SystemHealth

logger = getLogger(__name__)


class PostsResponse(BaseModel):
    posts: list[BlogPost]
    offline: bool = Field(description="True when the static fallback set is served")


class PostResponse(BaseModel):
    post: BlogPost
    offline: bool


class InvalidationResponse(BaseModel):
    prefix: str
    removed: int


def add_routes(app: FastAPI, prefix: str = "") -> None:
    """Register the blog routes on ``app`` under ``prefix``."""

    @app.get(f"{prefix}/posts", response_model=PostsResponse)
    async def list_posts(service: BlogServiceDep) -> PostsResponse:
        posts = await service.get_posts()
        return PostsResponse(posts=posts, offline=has_fallback_content(posts))

    @app.get(f"{prefix}/posts/{{slug}}", response_model=PostResponse)
    async def get_post(slug: str, service: BlogServiceDep) -> PostResponse:
        try:
            post = await service.get_post(slug)
        except PostNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except InvalidSlugError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return PostResponse(post=post, offline=post.is_fallback)

    @app.get(f"{prefix}/cache/stats", response_model=CacheStats)
    async def cache_stats(service: BlogServiceDep) -> CacheStats:
        return await service.monitor.log_stats()

    @app.post(f"{prefix}/cache/invalidate", response_model=InvalidationResponse)
    async def invalidate_cache(
        service: BlogServiceDep,
        key_prefix: str = Query(default=NOTION_PREFIX, alias="prefix"),
    ) -> InvalidationResponse:
        removed = await service.invalidation.invalidate_prefix(key_prefix)
        logger.info("Invalidated %d cache entries with prefix %r", removed, key_prefix)
        return InvalidationResponse(prefix=key_prefix, removed=removed)

    @app.post(f"{prefix}/cache/refresh", response_model=PostsResponse)
    async def refresh_cache(service: BlogServiceDep) -> PostsResponse:
        posts = await service.refresh_cache()
        return PostsResponse(posts=posts, offline=has_fallback_content(posts))

    @app.get(f"{prefix}/health", response_model=SystemHealth)
    async def health(service: BlogServiceDep) -> SystemHealth:
        return await service.health()

    @app.get(f"{prefix}/connection", response_model=ConnectionStatus)
    async def connection(service: BlogServiceDep) -> ConnectionStatus:
        return await service.connection_status()
