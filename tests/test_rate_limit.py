from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path

from app.core.config import DatabaseSettings, Settings
from app.infrastructure.database import build_engine, build_session_factory, init_db
from app.infrastructure.database.repositories import SqlRateLimitStore
from app.modules.ratelimit import InMemoryRateLimitStore, RateLimiter, hash_key

START = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_limiter(store=None, clock=None) -> RateLimiter:
    return RateLimiter(
        store=store or InMemoryRateLimitStore(),
        window=timedelta(hours=1),
        max_hits=5,
        clock=clock or FakeClock(),
    )


def test_hash_key_is_stable_and_hides_ip():
    assert hash_key("203.0.113.7") == hash_key("203.0.113.7")
    assert hash_key("203.0.113.7") != hash_key("203.0.113.8")
    assert "203.0.113.7" not in hash_key("203.0.113.7")


def test_sixth_submission_in_an_hour_is_refused_until_window_passes():
    clock = FakeClock()
    limiter = make_limiter(clock=clock)

    async def scenario():
        outcomes = []
        for _ in range(5):
            outcomes.append(await limiter.is_allowed("ip"))
            await limiter.record("ip")
            clock.advance(minutes=1)
        outcomes.append(await limiter.is_allowed("ip"))
        clock.advance(hours=1)
        outcomes.append(await limiter.is_allowed("ip"))
        return outcomes

    assert asyncio.run(scenario()) == [True, True, True, True, True, False, True]


def test_check_alone_does_not_consume_the_window():
    limiter = make_limiter()

    async def scenario():
        for _ in range(20):
            assert await limiter.is_allowed("ip")

    asyncio.run(scenario())


def test_limits_are_per_key():
    limiter = make_limiter()

    async def scenario():
        for _ in range(5):
            await limiter.record("a")
        return await limiter.is_allowed("a"), await limiter.is_allowed("b")

    assert asyncio.run(scenario()) == (False, True)


def test_record_and_check_stops_at_cap():
    limiter = make_limiter()

    async def scenario():
        return [await limiter.record_and_check("ip") for _ in range(6)]

    assert asyncio.run(scenario()) == [True] * 5 + [False]


def test_memory_store_drops_keys_once_all_hits_expire():
    clock = FakeClock()
    store = InMemoryRateLimitStore()
    limiter = make_limiter(store=store, clock=clock)

    async def scenario():
        await limiter.record("a")
        await limiter.record("b")
        clock.advance(minutes=61)
        await limiter.is_allowed("a")

    asyncio.run(scenario())
    assert len(store) == 0


def test_sql_store_counts_and_prunes(tmp_path: Path):
    settings = Settings(database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'limits.db'}"))
    clock = FakeClock()

    async def scenario():
        engine = build_engine(settings)
        try:
            await init_db(engine)
            store = SqlRateLimitStore(build_session_factory(engine))
            limiter = make_limiter(store=store, clock=clock)
            for _ in range(5):
                await limiter.record("ip")
            blocked = not await limiter.is_allowed("ip")
            other_key = await limiter.is_allowed("other")
            clock.advance(hours=2)
            allowed_again = await limiter.is_allowed("ip")
            remaining = await store.count_since("ip", START - timedelta(days=1))
        finally:
            await engine.dispose()
        return blocked, other_key, allowed_again, remaining

    assert asyncio.run(scenario()) == (True, True, True, 0)


def test_scoped_keys_are_independent():
    assert hash_key("203.0.113.7", "contact") != hash_key("203.0.113.7", "quick")
    assert hash_key("203.0.113.7", "contact") != hash_key("203.0.113.7")
    assert len(hash_key("203.0.113.7", "quick")) == 64
