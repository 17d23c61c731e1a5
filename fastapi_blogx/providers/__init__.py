"""Remote content providers for FastAPI-BlogX."""

from .base import ContentProvider
from .markdown import blocks_to_markdown
from .notion import NotionProvider

__all__ = [
    "ContentProvider",
    "NotionProvider",
    "blocks_to_markdown",
]
