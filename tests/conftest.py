from collections.abc import Callable
from typing import Any

import pytest
import pytest_asyncio

from fastapi_blogx.backends.memory import MemoryBackend
from fastapi_blogx.config import Settings
from fastapi_blogx.exceptions import ProviderError
from fastapi_blogx.models import BlogPost
from fastapi_blogx.queue import RequestQueue
from fastapi_blogx.retry import RetryPolicy
from fastapi_blogx.service import BlogService
from fastapi_blogx.types import ErrorKind


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeProvider:
    """In-memory content provider with scriptable failures."""

    def __init__(self, posts: list[BlogPost] | None = None) -> None:
        self.posts = posts if posts is not None else []
        self.errors: list[Exception] = []
        self.list_calls = 0
        self.connected = True
        self.closed = False

    async def list_published(self) -> list[BlogPost]:
        self.list_calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return list(self.posts)

    async def get_by_id_or_slug(self, value: str) -> BlogPost:
        for post in self.posts:
            if value in (post.id, post.slug):
                return post
        raise ProviderError(f"Post not found: {value}", ErrorKind.NOT_FOUND)

    async def validate_connection(self) -> bool:
        return self.connected

    async def aclose(self) -> None:
        self.closed = True


def build_post(slug: str, title: str | None = None, **overrides: Any) -> BlogPost:
    data = {
        "id": f"page-{slug}",
        "title": title or slug.replace("-", " ").title(),
        "description": f"About {slug}",
        "date": "2025-03-01",
        "slug": slug,
        "author": "Ada",
        "content": f"# {slug}",
    }
    data.update(overrides)
    return BlogPost(**data)


@pytest.fixture
def make_post() -> Callable[..., BlogPost]:
    return build_post


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest_asyncio.fixture
def memory_backend(clock: FakeClock) -> MemoryBackend:
    return MemoryBackend(clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        notion_token="secret_test",
        blog_index_id="db-123",
        app_env="test",
    )


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider([build_post("first-post"), build_post("second-post")])


@pytest.fixture
def service_factory(
    settings: Settings, memory_backend: MemoryBackend
) -> Callable[..., BlogService]:
    def factory(provider: Any = None, **settings_overrides: Any) -> BlogService:
        service_settings = settings.model_copy(update=settings_overrides)
        return BlogService(
            service_settings,
            provider=provider,
            backend=memory_backend,
            queue=RequestQueue(0),
            policy=RetryPolicy(max_retries=0),
        )

    return factory


@pytest.fixture
def provider_factory() -> Callable[..., FakeProvider]:
    return FakeProvider
