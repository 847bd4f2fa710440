"""SQLAlchemy repository for contact rate-limit hits."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.models import RateLimitHit as RateLimitHitModel


class SqlRateLimitStore:
    """Rate-limit store shared by every worker pointed at the same database.

    Each call runs in its own short transaction because the limiter lives
    for the whole process, not for a single request.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def count_since(self, key: str, since: datetime) -> int:
        stmt = select(func.count(RateLimitHitModel.id)).where(
            RateLimitHitModel.key == key,
            RateLimitHitModel.created_at >= since,
        )
        async with self._session_factory() as session:
            total = (await session.execute(stmt)).scalar()
        return int(total or 0)

    async def record(self, key: str, at: datetime) -> None:
        async with self._session_factory() as session:
            session.add(RateLimitHitModel(key=key, created_at=at))
            await session.commit()

    async def prune(self, before: datetime) -> None:
        stmt = delete(RateLimitHitModel).where(RateLimitHitModel.created_at < before)
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()
