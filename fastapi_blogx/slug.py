"""Slug normalization and lookup."""

import re
from collections.abc import Iterable
from typing import Optional

from fastapi_blogx.models import BlogPost

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w-]+", re.ASCII)
_REPEATED_HYPHENS = re.compile(r"--+")


def create_slug(text: str) -> str:
    """Normalize ``text`` into a URL slug.

    >>> create_slug("Hello   World!!")
    'hello-world'
    """
    slug = _WHITESPACE.sub("-", text.lower())
    slug = _NON_WORD.sub("", slug)
    slug = _REPEATED_HYPHENS.sub("-", slug)
    return slug.strip()


def find_by_slug(posts: Iterable[BlogPost], slug: str) -> Optional[BlogPost]:
    """Return the first post whose slug matches the normalized ``slug``."""
    wanted = create_slug(slug)
    for post in posts:
        if post.slug == wanted:
            return post
    return None
