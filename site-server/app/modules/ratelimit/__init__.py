"""Rolling-window rate limiting for public form endpoints."""

from .repository import RateLimitStore
from .memory import InMemoryRateLimitStore
from .service import RateLimiter, hash_key

__all__ = [
    "RateLimitStore",
    "InMemoryRateLimitStore",
    "RateLimiter",
    "hash_key",
]
