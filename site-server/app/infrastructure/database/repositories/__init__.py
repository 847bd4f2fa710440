"""SQLAlchemy-backed repository implementations."""

from .rate_limit_repository import SqlRateLimitStore

__all__ = [
    "SqlRateLimitStore",
]
