"""FastAPI-BlogX: resilient blog content retrieval for FastAPI."""

from .cache import cached_function as cached_function
from .dependencies import BlogServiceDep as BlogServiceDep
from .dependencies import get_blog_service as get_blog_service
from .dependencies import set_blog_service as set_blog_service
from .fallback import get_post_with_fallback as get_post_with_fallback
from .fallback import get_posts_with_fallback as get_posts_with_fallback
from .fetcher import ResilientFetcher as ResilientFetcher
from .queue import RequestQueue as RequestQueue
from .retry import RetryPolicy as RetryPolicy
from .retry import retry_with_backoff as retry_with_backoff
from .routes import add_routes as add_routes
from .service import BlogService as BlogService
from .service import create_blog_service as create_blog_service

__all__ = [
    "BlogService",
    "BlogServiceDep",
    "RequestQueue",
    "ResilientFetcher",
    "RetryPolicy",
    "add_routes",
    "cached_function",
    "create_blog_service",
    "get_blog_service",
    "get_post_with_fallback",
    "get_posts_with_fallback",
    "retry_with_backoff",
]
