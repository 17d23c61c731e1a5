"""Type definitions and type aliases for FastAPI-BlogX."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of remote failure variants."""

    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    NETWORK = "network"
    OTHER = "other"


@dataclass
class CacheItem:
    """Cache item stamped with its insertion time.

    Args:
        value: The cached payload
        stored_at: Clock reading (seconds) when the item was stored
        ttl: Seconds after ``stored_at`` during which the item is fresh
    """

    value: Any
    stored_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.stored_at

    def is_fresh(self, now: float) -> bool:
        return self.age(now) <= self.ttl
