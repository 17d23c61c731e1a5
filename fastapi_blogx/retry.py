"""Retry with exponential backoff for remote content calls."""

import asyncio
import random
import re
from collections.abc import Awaitable
from collections.abc import Callable
from logging import getLogger
from typing import Any
from typing import Optional

import httpx
from pydantic import BaseModel
from pydantic import Field
from tenacity import AsyncRetrying
from tenacity import RetryCallState
from tenacity import retry_if_exception
from tenacity import stop_after_attempt

from fastapi_blogx.cache import get_response
from fastapi_blogx.exceptions import ProviderError
from fastapi_blogx.types import ErrorKind

logger = getLogger(__name__)

RETRYABLE_KINDS = frozenset(
    {ErrorKind.RATE_LIMITED, ErrorKind.TIMEOUT, ErrorKind.SERVER_ERROR}
)

# Checked in order; the first matching group wins. Status codes only match
# as whole numbers.
_MESSAGE_PATTERNS: tuple[tuple[ErrorKind, re.Pattern], ...] = (
    (ErrorKind.RATE_LIMITED, re.compile(r"rate limit|rate_limited|\b429\b")),
    (
        ErrorKind.UNAUTHORIZED,
        re.compile(r"unauthorized|\b401\b|\b403\b|invalid token|api token"),
    ),
    (ErrorKind.TIMEOUT, re.compile(r"timeout|timed out|etimedout")),
    (
        ErrorKind.SERVER_ERROR,
        re.compile(
            r"\b50[0234]\b|gateway|service unavailable|internal server error"
        ),
    ),
)


class RetryPolicy(BaseModel):
    """Backoff parameters. Delays are in seconds."""

    max_retries: int = Field(default=6, ge=0, description="Retries after the first attempt")
    base_delay: float = Field(default=2.0, gt=0, description="Delay before the first retry")
    max_delay: float = Field(default=45.0, gt=0, description="Upper bound before jitter")
    backoff_factor: float = Field(default=2.5, ge=1.0)
    jitter_ratio: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Jitter is +/- this fraction of the clamped delay",
    )
    min_delay: float = Field(default=0.5, ge=0.0, description="Floor after jitter")


def classify_error(error: BaseException) -> ErrorKind:
    """Map an exception onto an ``ErrorKind``.

    Provider errors carry their kind already. Anything else is classified by
    type for timeouts and by message otherwise.
    """
    if isinstance(error, ProviderError):
        return error.kind
    if isinstance(error, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorKind.TIMEOUT

    message = str(error).lower()
    for kind, pattern in _MESSAGE_PATTERNS:
        if pattern.search(message):
            return kind
    return ErrorKind.OTHER


def is_retryable(error: BaseException) -> bool:
    return classify_error(error) in RETRYABLE_KINDS


def compute_delay(
    kind: ErrorKind,
    retry_count: int,
    policy: RetryPolicy,
    rng: Callable[[], float] = random.random,
) -> float:
    """Seconds to wait before retry number ``retry_count + 1``.

    Rate limits back off two steps further than timeouts and server errors.
    """
    exponent = retry_count + 2 if kind is ErrorKind.RATE_LIMITED else retry_count
    delay = min(policy.base_delay * policy.backoff_factor**exponent, policy.max_delay)
    jitter = delay * policy.jitter_ratio * (2 * rng() - 1)
    return max(policy.min_delay, delay + jitter)


def wait_backoff(
    policy: RetryPolicy, rng: Callable[[], float] = random.random
) -> Callable[[RetryCallState], float]:
    """Tenacity wait strategy built on ``compute_delay``."""

    def wait(retry_state: RetryCallState) -> float:
        kind = classify_error(retry_state.outcome.exception())
        return compute_delay(kind, retry_state.attempt_number - 1, policy, rng)

    return wait


def _log_before_sleep(context: str, policy: RetryPolicy) -> Callable[[RetryCallState], None]:
    def log(retry_state: RetryCallState) -> None:
        kind = classify_error(retry_state.outcome.exception())
        logger.warning(
            "%s failed with %s error (attempt %d/%d), retrying in %.2fs",
            context,
            kind.value,
            retry_state.attempt_number,
            policy.max_retries + 1,
            retry_state.next_action.sleep,
        )

    return log


async def retry_with_backoff(
    operation: Callable[[], Any],
    context: str = "operation",
    policy: Optional[RetryPolicy] = None,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    rng: Callable[[], float] = random.random,
) -> Any:
    """Run ``operation`` until it succeeds or fails for good.

    Rate limits, timeouts and server errors are retried up to
    ``policy.max_retries`` times. Every other error is raised on the spot.

    Args:
        operation: Zero-argument callable, sync or async
        context: Label used in log messages
        policy: Backoff parameters, defaults to ``RetryPolicy()``
        sleep: Awaitable sleep, replaceable in tests
        rng: Source of uniform [0, 1) numbers for jitter

    Raises:
        The last error raised by ``operation``.
    """
    policy = policy or RetryPolicy()
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_retries + 1),
        retry=retry_if_exception(is_retryable),
        wait=wait_backoff(policy, rng),
        sleep=sleep,
        before_sleep=_log_before_sleep(context, policy),
        reraise=True,
    )
    try:
        return await retrying(get_response, operation)
    except Exception as exc:
        if is_retryable(exc):
            logger.error(
                "%s failed after %d retries: %r", context, policy.max_retries, exc
            )
        else:
            logger.debug("%s failed with non-retryable error: %r", context, exc)
        raise
