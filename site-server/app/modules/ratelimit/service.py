"""Rolling-window limiter on top of a pluggable hit store."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from .repository import RateLimitStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def hash_key(raw: str, scope: str = "") -> str:
    """Stable storage key for a requester address; raw IPs are never stored.

    Different scopes give the same address independent counters.
    """
    if scope:
        raw = f"{scope}:{raw}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class RateLimiter:
    store: RateLimitStore
    window: timedelta
    max_hits: int
    clock: Callable[[], datetime] = _utcnow
    # serializes read-then-write against the store within this process
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def _allowed(self, key: str, now: datetime) -> bool:
        cutoff = now - self.window
        await self.store.prune(cutoff)
        count = await self.store.count_since(key, cutoff)
        return count < self.max_hits

    async def is_allowed(self, key: str) -> bool:
        """Check the trailing window without recording anything."""
        async with self._lock:
            allowed = await self._allowed(key, self.clock())
        if not allowed:
            logger.info("Rate limit reached for key %s", key[:12])
        return allowed

    async def record(self, key: str) -> None:
        async with self._lock:
            await self.store.record(key, self.clock())

    async def record_and_check(self, key: str) -> bool:
        """Record a hit only when the window still has room; returns whether it did."""
        async with self._lock:
            now = self.clock()
            if not await self._allowed(key, now):
                return False
            await self.store.record(key, now)
            return True
