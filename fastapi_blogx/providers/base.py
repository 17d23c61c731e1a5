from typing import Protocol
from typing import runtime_checkable

from fastapi_blogx.models import BlogPost


@runtime_checkable
class ContentProvider(Protocol):
    """Remote source of blog posts.

    Implementations raise ``ProviderError`` with the matching ``ErrorKind``
    for every remote failure.
    """

    async def list_published(self) -> list[BlogPost]: ...

    async def get_by_id_or_slug(self, value: str) -> BlogPost: ...

    async def validate_connection(self) -> bool: ...

    async def aclose(self) -> None: ...
