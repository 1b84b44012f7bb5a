"""
API Base — Rate Limiter and Store Tests
========================================

What we test:
    ✅ Requests up to the limit are allowed; the next one is denied
    ✅ A denied request does not extend the count or the window
    ✅ retry_after is the rounded-up time left in the window (min 1s)
    ✅ A new window starts once the reset time has passed
    ✅ Clients are counted independently; reset() clears one client
    ✅ An injected store is used even while it is empty
    ✅ In-memory cache store: TTL expiry, substring clear, purge
"""

import pytest

from api_base.security.rate_limit import FixedWindowRateLimiter
from api_base.security.stores import InMemoryCacheStore, InMemoryRateLimitStore


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestFixedWindowRateLimiter:
    def setup_method(self):
        self.clock = FakeClock()
        self.store = InMemoryRateLimitStore()
        self.limiter = FixedWindowRateLimiter(
            store=self.store, max_requests=3, window_seconds=60, clock=self.clock
        )

    def test_keeps_empty_injected_store(self):
        assert len(self.store) == 0
        assert self.limiter.store is self.store

    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self):
        decisions = [await self.limiter.hit("1.2.3.4") for _ in range(3)]
        assert all(d.allowed for d in decisions)
        assert [d.remaining for d in decisions] == [2, 1, 0]

    @pytest.mark.asyncio
    async def test_denies_after_limit_without_counting(self):
        for _ in range(3):
            await self.limiter.hit("1.2.3.4")

        self.clock.now += 10.2
        denied = await self.limiter.hit("1.2.3.4")
        assert denied.allowed is False
        assert denied.retry_after == 50  # ceil(1060 - 1010.2)

        counter = await self.store.get("1.2.3.4")
        assert counter.count == 3
        assert counter.reset_at == 1060.0

    @pytest.mark.asyncio
    async def test_retry_after_is_at_least_one_second(self):
        for _ in range(3):
            await self.limiter.hit("1.2.3.4")
        self.clock.now = 1060.0  # exactly at reset time: window still current
        denied = await self.limiter.hit("1.2.3.4")
        assert denied.allowed is False
        assert denied.retry_after == 1

    @pytest.mark.asyncio
    async def test_new_window_after_reset_time(self):
        for _ in range(4):
            await self.limiter.hit("1.2.3.4")

        self.clock.now = 1060.5
        decision = await self.limiter.hit("1.2.3.4")
        assert decision.allowed is True
        assert decision.remaining == 2
        counter = await self.store.get("1.2.3.4")
        assert counter.count == 1
        assert counter.reset_at == 1120.5

    @pytest.mark.asyncio
    async def test_clients_are_independent(self):
        for _ in range(3):
            await self.limiter.hit("1.1.1.1")
        assert (await self.limiter.hit("1.1.1.1")).allowed is False
        assert (await self.limiter.hit("2.2.2.2")).allowed is True
        assert len(self.store) == 2

    @pytest.mark.asyncio
    async def test_reset_clears_client(self):
        for _ in range(3):
            await self.limiter.hit("1.1.1.1")
        await self.limiter.reset("1.1.1.1")
        assert (await self.limiter.hit("1.1.1.1")).allowed is True


class TestInMemoryCacheStore:
    def setup_method(self):
        self.clock = FakeClock()
        self.store = InMemoryCacheStore(clock=self.clock)

    @pytest.mark.asyncio
    async def test_value_expires_after_ttl(self):
        await self.store.set("/examples:", "cached", ttl=30)
        assert await self.store.get("/examples:") == "cached"

        self.clock.now += 30
        assert await self.store.get("/examples:") is None
        assert len(self.store) == 0

    @pytest.mark.asyncio
    async def test_clear_by_substring(self):
        await self.store.set("/examples:", 1, ttl=30)
        await self.store.set("/examples/abc:", 2, ttl=30)
        await self.store.set("/health:", 3, ttl=30)

        removed = await self.store.clear("/examples")
        assert removed == 2
        assert await self.store.get("/health:") == 3

    @pytest.mark.asyncio
    async def test_clear_all(self):
        await self.store.set("a", 1, ttl=30)
        await self.store.set("b", 2, ttl=30)
        assert await self.store.clear() == 2
        assert len(self.store) == 0

    @pytest.mark.asyncio
    async def test_purge_expired(self):
        await self.store.set("short", 1, ttl=5)
        await self.store.set("long", 2, ttl=60)
        self.clock.now += 10
        assert await self.store.purge_expired() == 1
        assert await self.store.get("long") == 2

    @pytest.mark.asyncio
    async def test_delete(self):
        await self.store.set("key", 1, ttl=5)
        await self.store.delete("key")
        await self.store.delete("missing")
        assert await self.store.get("key") is None
