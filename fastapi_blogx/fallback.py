"""Static fallback content served when Notion cannot be reached.

Every fallback post has an id starting with ``FALLBACK_ID_PREFIX`` so the
page layer can show an offline banner instead of an error page.
"""

from collections.abc import Callable
from collections.abc import Iterable
from datetime import datetime
from datetime import timezone
from logging import getLogger
from typing import Any

import httpx

from fastapi_blogx.cache import get_response
from fastapi_blogx.exceptions import FallbackPostNotFoundError
from fastapi_blogx.exceptions import InvalidSlugError
from fastapi_blogx.exceptions import ProviderError
from fastapi_blogx.models import FALLBACK_ID_PREFIX
from fastapi_blogx.models import BlogPost
from fastapi_blogx.retry import classify_error
from fastapi_blogx.slug import create_slug
from fastapi_blogx.types import ErrorKind

logger = getLogger(__name__)

FALLBACK_AUTHOR = "Site Owner"

FALLBACK_KINDS = frozenset(
    {
        ErrorKind.RATE_LIMITED,
        ErrorKind.UNAUTHORIZED,
        ErrorKind.TIMEOUT,
        ErrorKind.SERVER_ERROR,
        ErrorKind.NETWORK,
    }
)

# Matched case-insensitively against the error message and class name.
FALLBACK_TRIGGERS = (
    "rate limit",
    "rate_limited",
    "unauthorized",
    "invalid token",
    "api token",
    "network",
    "timeout",
    "timed out",
    "econnrefused",
    "etimedout",
    "service unavailable",
    "internal server error",
    "fetch failed",
    "request failed",
    "connection refused",
    "connecterror",
)

FALLBACK_POSTS = (
    BlogPost(
        id=f"{FALLBACK_ID_PREFIX}1",
        title="Welcome to My Blog",
        description="An introduction to what this blog covers.",
        date="2024-01-01T00:00:00Z",
        slug="welcome-to-my-blog",
        author=FALLBACK_AUTHOR,
        content="""# Welcome to My Blog

Thanks for stopping by. You are reading a placeholder post: the content
management system behind this blog is unreachable right now.

## Topics

- **Software development**: workflows, tooling and lessons learned
- **Machine learning**: papers and practical experiments
- **Web development**: frameworks and performance work

Posts will come back on their own once the connection is restored. In the
meantime, have a look at the [projects](/projects) page.""",
    ),
    BlogPost(
        id=f"{FALLBACK_ID_PREFIX}2",
        title="System Maintenance Notice",
        description="Why the blog is showing offline content.",
        date="2024-01-02T00:00:00Z",
        slug="system-maintenance-notice",
        author=FALLBACK_AUTHOR,
        content="""# System Maintenance Notice

The blog content provider is not answering. Usual causes:

- **Rate limiting** by the provider, typically cleared within 15 minutes
- **Network problems** between this site and the provider
- **Provider maintenance**

Requests are retried with exponential backoff and recent content is served
from cache when available. This page disappears once the provider responds
again.""",
    ),
)

UNAVAILABLE_CONTENT = """# Content Temporarily Unavailable

The post you asked for cannot be loaded because the content management
system is unreachable.

- **Refresh** in a few minutes
- **Browse** the [projects](/projects) or the [home page](/)

The post will be back automatically once the connection is restored."""


def is_fallback(post: BlogPost) -> bool:
    return post.id.startswith(FALLBACK_ID_PREFIX)


def has_fallback_content(posts: Iterable[BlogPost]) -> bool:
    """True when any post came from the static set, i.e. the site is offline."""
    return any(is_fallback(post) for post in posts)


def get_fallback_posts() -> list[BlogPost]:
    logger.info("Using fallback blog posts due to API unavailability")
    return [post.model_copy() for post in FALLBACK_POSTS]


def get_fallback_post(slug: str) -> BlogPost:
    wanted = create_slug(slug)
    for post in FALLBACK_POSTS:
        if post.slug == wanted:
            return post.model_copy()
    raise FallbackPostNotFoundError(f"Fallback post not found: {slug}")


def build_unavailable_post(slug: str) -> BlogPost:
    """Synthesize a placeholder carrying the requested slug."""
    return BlogPost(
        id=f"{FALLBACK_ID_PREFIX}{slug}",
        title="Content Temporarily Unavailable",
        description="This content is temporarily unavailable due to connectivity issues.",
        date=datetime.now(timezone.utc).isoformat(),
        slug=slug,
        author=FALLBACK_AUTHOR,
        content=UNAVAILABLE_CONTENT,
    )


def _fallback_post_for(slug: str) -> BlogPost:
    try:
        return get_fallback_post(slug)
    except FallbackPostNotFoundError:
        logger.warning("Fallback post not found for %s, using generic fallback", slug)
        return build_unavailable_post(slug)


def should_use_fallback(error: BaseException | None, *, build_phase: bool = False) -> bool:
    """Decide whether ``error`` means "remote unavailable" rather than a bug."""
    if error is None:
        return False

    if build_phase:
        logger.info(
            "Build-time error detected: %s - %s", error.__class__.__name__, error
        )
        return True

    if isinstance(error, ProviderError):
        return error.kind is not ErrorKind.NOT_FOUND

    if isinstance(error, (ConnectionError, httpx.TransportError)):
        return True

    if classify_error(error) in FALLBACK_KINDS:
        return True

    message = str(error).lower()
    name = error.__class__.__name__.lower()
    return any(trigger in message or trigger in name for trigger in FALLBACK_TRIGGERS)


async def get_posts_with_fallback(
    primary_fetcher: Callable[[], Any],
    force_fallback: bool = False,
    *,
    build_phase: bool = False,
) -> list[BlogPost]:
    """Return the primary posts, or the static set when the primary is unusable.

    An empty result counts as an outage. Errors that are not fallback-worthy
    are re-raised.
    """
    if force_fallback:
        return get_fallback_posts()

    try:
        posts = await get_response(primary_fetcher)
    except Exception as exc:
        logger.error("Primary blog fetch failed: %r", exc)
        if should_use_fallback(exc, build_phase=build_phase):
            logger.warning("Error qualifies for fallback, switching to offline mode")
            return get_fallback_posts()
        raise

    if not posts:
        logger.warning("No posts returned from primary source, using fallback")
        return get_fallback_posts()

    return list(posts)


async def get_post_with_fallback(
    slug: str,
    primary_fetcher: Callable[[], Any],
    force_fallback: bool = False,
    *,
    build_phase: bool = False,
) -> BlogPost:
    """Return one post, never failing for a fallback-worthy error.

    Raises:
        InvalidSlugError: If ``slug`` is empty
        Exception: Whatever the primary fetcher raised, when it is not
            fallback-worthy
    """
    if not slug:
        raise InvalidSlugError("Slug is required")

    if force_fallback:
        return _fallback_post_for(slug)

    try:
        return await get_response(primary_fetcher)
    except Exception as exc:
        logger.error("Primary blog post fetch failed for %s: %r", slug, exc)
        if should_use_fallback(exc, build_phase=build_phase):
            logger.warning("Error qualifies for fallback, trying fallback post for %s", slug)
            return _fallback_post_for(slug)
        raise
