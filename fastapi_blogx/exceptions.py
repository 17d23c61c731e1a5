from typing import Optional

from fastapi_blogx.types import ErrorKind


class BlogXError(Exception):
    """Base class for all exceptions in FastAPI-BlogX."""


class CacheError(BlogXError):
    """Exception raised for cache-related errors."""


class ProviderError(BlogXError):
    """Error raised by a remote content provider.

    The ``kind`` is decided once, where the provider response is read, so the
    retry and fallback layers never have to parse messages for it.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.OTHER,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.code = code

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({str(self)!r}, kind={self.kind.value}, "
            f"status_code={self.status_code})"
        )


class PostNotFoundError(BlogXError):
    """Raised when no post matches the requested slug."""


class FallbackPostNotFoundError(BlogXError):
    """Raised when no static fallback post matches the requested slug."""


class InvalidSlugError(BlogXError, ValueError):
    """Raised when a caller passes an empty slug."""


class ServiceNotConfiguredError(BlogXError):
    """Raised when the blog service has not been attached to the app."""


class RequestQueueError(BlogXError):
    """Raised for queued operations abandoned when the drain loop stops."""
