"""
API Base — Fixed Window Rate Limiter
=====================================

What:  Per-client request budget (default 100 requests per 15 minutes).
Why:   Protects the API from brute-force and scraping traffic before any
       body parsing or database work happens.
How:   Each client gets a counter and a reset time. The first request after
       the reset time starts a new window wholesale.

Algorithm: Fixed Window Counter
    1. No counter, or now > reset_at → new window with count = 1, allow
    2. count >= max_requests        → deny, count unchanged,
                                      retry_after = ceil(reset_at - now)
    3. Otherwise                     → count += 1, allow

    A fixed window allows a burst of up to 2 × max_requests around a window
    boundary. That is accepted here in exchange for O(1) state per client.
"""

import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from api_base.security.stores import InMemoryRateLimitStore, RateLimitStore

DEFAULT_MAX_REQUESTS = 100
DEFAULT_WINDOW_SECONDS = 15 * 60


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: int = 0  # seconds; only meaningful when denied


class FixedWindowRateLimiter:
    """
    Fixed-window limiter over an injectable RateLimitStore.

    Args:
        store:           Counter storage (in-memory by default)
        max_requests:    Requests allowed per window
        window_seconds:  Window length
        clock:           Returns epoch seconds; replaced in tests
    """

    def __init__(
        self,
        store: Optional[RateLimitStore] = None,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock

    async def hit(self, client_id: str) -> RateLimitDecision:
        """Record one request for client_id and decide whether it may proceed."""
        now = self._clock()
        counter = await self.store.get(client_id)

        if counter is None or now > counter.reset_at:
            await self.store.start_window(client_id, self.window_seconds, now)
            return RateLimitDecision(allowed=True, remaining=self.max_requests - 1)

        if counter.count >= self.max_requests:
            retry_after = max(1, math.ceil(counter.reset_at - now))
            return RateLimitDecision(allowed=False, remaining=0, retry_after=retry_after)

        counter = await self.store.increment(client_id)
        return RateLimitDecision(allowed=True, remaining=max(0, self.max_requests - counter.count))

    async def reset(self, client_id: str) -> None:
        await self.store.expire(client_id)
