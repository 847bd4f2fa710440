"""Feature modules."""

from . import contact, ratelimit

__all__ = [
    "contact",
    "ratelimit",
]
