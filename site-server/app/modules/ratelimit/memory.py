"""Process-local rate-limit store for single-worker deployments and tests."""

from __future__ import annotations

from datetime import datetime


class InMemoryRateLimitStore:
    def __init__(self) -> None:
        self._hits: dict[str, list[datetime]] = {}

    async def count_since(self, key: str, since: datetime) -> int:
        return sum(1 for at in self._hits.get(key, ()) if at >= since)

    async def record(self, key: str, at: datetime) -> None:
        self._hits.setdefault(key, []).append(at)

    async def prune(self, before: datetime) -> None:
        for key in list(self._hits):
            retained = [at for at in self._hits[key] if at >= before]
            if retained:
                self._hits[key] = retained
            else:
                del self._hits[key]

    def __len__(self) -> int:
        return len(self._hits)
