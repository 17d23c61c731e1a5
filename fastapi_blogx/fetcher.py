from collections.abc import Callable
from typing import Any
from typing import Optional

from fastapi_blogx.backends import BaseCacheBackend
from fastapi_blogx.cache import cached_function
from fastapi_blogx.queue import RequestQueue
from fastapi_blogx.retry import RetryPolicy
from fastapi_blogx.retry import retry_with_backoff


class ResilientFetcher:
    """Cache-aside over retry/backoff over the rate-limited request queue."""

    def __init__(
        self,
        backend: BaseCacheBackend,
        queue: RequestQueue,
        policy: Optional[RetryPolicy] = None,
        **retry_options: Any,
    ) -> None:
        self.backend = backend
        self.queue = queue
        self.policy = policy or RetryPolicy()
        self.retry_options = retry_options

    async def fetch(
        self,
        cache_key: str,
        remote_call: Callable[[], Any],
        ttl: float,
        context: Optional[str] = None,
        force_refresh: bool = False,
    ) -> Any:
        """Return the cached value for ``cache_key`` or fetch it remotely.

        Each retry attempt goes through the queue again, so retries are
        spaced like any other request.
        """

        async def producer() -> Any:
            return await retry_with_backoff(
                lambda: self.queue.submit(remote_call),
                context or cache_key,
                self.policy,
                **self.retry_options,
            )

        return await cached_function(
            self.backend, cache_key, producer, ttl=ttl, force_refresh=force_refresh
        )
