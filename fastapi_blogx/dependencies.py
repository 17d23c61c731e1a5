"""FastAPI dependencies for FastAPI-BlogX."""

from typing import Annotated

from fastapi import Depends
from fastapi import FastAPI
from fastapi import Request

from fastapi_blogx.exceptions import ServiceNotConfiguredError
from fastapi_blogx.service import BlogService


def set_blog_service(app: FastAPI, service: BlogService | None) -> None:
    """Attach the process-wide service to the app, or detach it with None."""
    app.state.blog_service = service


def get_blog_service(request: Request) -> BlogService:
    """Return the service attached to the running app.

    Raises:
        ServiceNotConfiguredError: If no service has been attached
    """
    service = getattr(request.app.state, "blog_service", None)
    if service is None:
        msg = "Blog service is not set. Call set_blog_service() at startup."
        raise ServiceNotConfiguredError(msg)
    return service


BlogServiceDep = Annotated[BlogService, Depends(get_blog_service)]
