"""Repository protocol for rate-limit hit persistence."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class RateLimitStore(Protocol):
    async def count_since(self, key: str, since: datetime) -> int:
        ...

    async def record(self, key: str, at: datetime) -> None:
        ...

    async def prune(self, before: datetime) -> None:
        ...
