"""
API Base — Shared State Stores
===============================

What:  Abstract stores for rate-limit counters and cached responses.
Why:   The rate limiter and the response cache need state that outlives a
       single request. Passing a store in (instead of keeping module-level
       dicts) lets tests start from a clean slate and lets deployments with
       several workers plug in a shared backend.
How:   Two ABCs with async methods so a network-backed implementation
       (e.g. Redis) fits the same contract. The in-memory versions below are
       the defaults and are safe for single-process async servers.

Production Upgrade Path:
    InMemory* stores are per process. With several uvicorn workers each
    worker counts and caches independently, so a client may get up to
    workers × limit requests per window.
    → Implement RateLimitStore / CacheStore on top of Redis (INCR + EXPIRE,
      SET with EX) and pass the instances to create_app().
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple


@dataclass
class WindowCounter:
    """Request count for one client inside one fixed window."""

    count: int
    reset_at: float  # epoch seconds when the window ends


@dataclass
class CachedResponse:
    """Response snapshot kept by the response cache."""

    status_code: int
    body: bytes
    headers: Dict[str, str]
    media_type: Optional[str] = None
    expires_at: float = 0.0


# ── Rate limit store ──────────────────────────────────────────────────────


class RateLimitStore(ABC):
    """Contract for fixed-window counters keyed by client identifier."""

    @abstractmethod
    async def get(self, key: str) -> Optional[WindowCounter]:
        ...

    @abstractmethod
    async def start_window(self, key: str, window_seconds: float, now: float) -> WindowCounter:
        """Replace any existing counter with count=1 and a fresh reset time."""
        ...

    @abstractmethod
    async def increment(self, key: str) -> WindowCounter:
        ...

    @abstractmethod
    async def expire(self, key: str) -> None:
        ...


class InMemoryRateLimitStore(RateLimitStore):
    """
    Dict-backed counter store.

    Entries are never garbage-collected; a stale entry is simply replaced the
    next time its client sends a request after the window ended.
    """

    def __init__(self):
        self._counters: Dict[str, WindowCounter] = {}

    async def get(self, key: str) -> Optional[WindowCounter]:
        return self._counters.get(key)

    async def start_window(self, key: str, window_seconds: float, now: float) -> WindowCounter:
        counter = WindowCounter(count=1, reset_at=now + window_seconds)
        self._counters[key] = counter
        return counter

    async def increment(self, key: str) -> WindowCounter:
        counter = self._counters[key]
        counter.count += 1
        return counter

    async def expire(self, key: str) -> None:
        self._counters.pop(key, None)

    def __len__(self) -> int:
        return len(self._counters)


# ── Cache store ───────────────────────────────────────────────────────────


class CacheStore(ABC):
    """Contract for a TTL key/value cache."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the live value for key, or None when missing or expired."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: float) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def clear(self, pattern: Optional[str] = None) -> int:
        """
        Drop every key, or only keys containing `pattern` as a substring.

        Returns the number of removed entries.
        """
        ...

    @abstractmethod
    async def purge_expired(self) -> int:
        ...


class InMemoryCacheStore(CacheStore):
    """Dict of key → (value, expires_at) with lazy expiry."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._clock = clock

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: Any, ttl: float) -> None:
        self._entries[key] = (value, self._clock() + ttl)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def clear(self, pattern: Optional[str] = None) -> int:
        if pattern is None:
            removed = len(self._entries)
            self._entries.clear()
            return removed
        matching = [key for key in self._entries if pattern in key]
        for key in matching:
            del self._entries[key]
        return len(matching)

    async def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
