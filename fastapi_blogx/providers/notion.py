"""Notion database adapter.

Talks to the public Notion REST API with ``httpx`` and turns every failure
into a ``ProviderError`` carrying the matching ``ErrorKind``.
"""

from datetime import datetime
from datetime import timezone
from logging import getLogger
from typing import Any
from typing import Optional

import httpx

from fastapi_blogx.exceptions import ProviderError
from fastapi_blogx.models import BlogPost
from fastapi_blogx.slug import create_slug
from fastapi_blogx.types import ErrorKind

from .markdown import blocks_to_markdown

logger = getLogger(__name__)

DEFAULT_BASE_URL = "https://api.notion.com"
DEFAULT_NOTION_VERSION = "2022-06-28"
PAGE_SIZE = 100


def error_kind_for_status(status_code: int) -> ErrorKind:
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code in (408, 504):
        return ErrorKind.TIMEOUT
    if status_code >= 500:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.OTHER


def _first_plain_text(items: Optional[list[dict[str, Any]]]) -> str:
    if not items:
        return ""
    return items[0].get("plain_text", "")


def page_to_post(page: dict[str, Any], content: str) -> BlogPost:
    """Build a post from a Notion page object and its rendered body."""
    properties = page.get("properties", {})
    title = _first_plain_text((properties.get("Page") or {}).get("title")) or "Untitled"
    provided_slug = _first_plain_text((properties.get("Slug") or {}).get("rich_text"))
    date = ((properties.get("Date") or {}).get("date") or {}).get("start")
    people = (properties.get("Author") or {}).get("people") or []
    tags = (properties.get("Tags") or {}).get("multi_select") or []

    return BlogPost(
        id=page["id"],
        title=title,
        description=_first_plain_text(
            (properties.get("Description") or {}).get("rich_text")
        ),
        date=date or datetime.now(timezone.utc).isoformat(),
        slug=create_slug(provided_slug or title),
        author=(people[0].get("name") if people else None) or "Anonymous",
        published=bool((properties.get("published") or {}).get("checkbox")),
        content=content,
        tags=[tag["name"] for tag in tags if tag.get("name")],
    )


class NotionProvider:
    """Blog posts from a Notion database."""

    def __init__(
        self,
        token: str,
        database_id: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        notion_version: str = DEFAULT_NOTION_VERSION,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.database_id = database_id
        self.client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {token}",
                "Notion-Version": notion_version,
                "Content-Type": "application/json",
            },
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise ProviderError(
                f"Request to Notion API timed out: {exc}", ErrorKind.TIMEOUT
            ) from exc
        except httpx.TransportError as exc:
            raise ProviderError(
                f"Network error talking to Notion API: {exc!r}", ErrorKind.NETWORK
            ) from exc

        if response.is_success:
            return response.json()

        code = None
        message = response.text
        try:
            body = response.json()
        except ValueError:
            pass
        else:
            code = body.get("code")
            message = body.get("message", message)
        raise ProviderError(
            f"Notion API error ({response.status_code}): {message}",
            error_kind_for_status(response.status_code),
            status_code=response.status_code,
            code=code,
        )

    async def query_published_pages(self) -> list[dict[str, Any]]:
        """Published pages of the database, newest first."""
        pages: list[dict[str, Any]] = []
        body: dict[str, Any] = {
            "filter": {"property": "published", "checkbox": {"equals": True}},
            "sorts": [{"property": "Date", "direction": "descending"}],
            "page_size": PAGE_SIZE,
        }
        while True:
            data = await self._request(
                "POST", f"/v1/databases/{self.database_id}/query", json=body
            )
            pages.extend(r for r in data.get("results", []) if "properties" in r)
            if not data.get("has_more"):
                return pages
            body["start_cursor"] = data["next_cursor"]

    async def list_block_children(self, block_id: str) -> list[dict[str, Any]]:
        blocks: list[dict[str, Any]] = []
        params: dict[str, Any] = {"page_size": PAGE_SIZE}
        while True:
            data = await self._request(
                "GET", f"/v1/blocks/{block_id}/children", params=params
            )
            blocks.extend(data.get("results", []))
            if not data.get("has_more"):
                return blocks
            params["start_cursor"] = data["next_cursor"]

    async def list_published(self) -> list[BlogPost]:
        pages = await self.query_published_pages()
        logger.info("Found %d published posts", len(pages))

        posts = []
        for page in pages:
            try:
                blocks = await self.list_block_children(page["id"])
                posts.append(page_to_post(page, blocks_to_markdown(blocks)))
            except (KeyError, TypeError, ValueError) as exc:
                logger.error("Error processing page %s: %r", page.get("id"), exc)
        return posts

    async def get_by_id_or_slug(self, value: str) -> BlogPost:
        wanted_slug = create_slug(value)
        for post in await self.list_published():
            if post.id == value or post.slug == wanted_slug:
                return post
        raise ProviderError(f"Post not found: {value}", ErrorKind.NOT_FOUND)

    async def validate_connection(self) -> bool:
        try:
            await self._request("GET", f"/v1/databases/{self.database_id}")
        except ProviderError as exc:
            logger.warning("Notion connection check failed: %s", exc)
            return False
        return True

    async def aclose(self) -> None:
        await self.client.aclose()
