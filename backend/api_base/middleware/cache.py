"""
API Base — Response Cache
==========================

What:  Caches GET responses for endpoints that opt in with @cache_response.
Why:   List and detail reads are far more frequent than writes; serving
       them from memory keeps the database idle for repeated reads.
How:   Routers built with `route_class=CachedRoute` wrap the handler of every
       marked GET endpoint. The wrapper looks the request up in the app's
       ResponseCache (`app.state.response_cache`) and stores 200 responses.
       Writes call ResponseCache.invalidate() so the next read sees fresh data.

Usage:
    router = APIRouter(prefix="/examples", route_class=CachedRoute)

    @router.get("/{example_id}")
    @cache_response(ttl=60)
    async def get_example(...): ...

    @router.get("/live")
    @skip_cache
    async def live(...): ...

    @cache_response() without a ttl uses settings.cache_default_ttl.

Headers:
    X-Cache:      HIT | MISS
    X-Cache-TTL:  seconds until the entry expires
"""

import logging
import math
import time
from typing import Any, Callable, Coroutine, Optional
from urllib.parse import urlencode

from fastapi.routing import APIRoute
from starlette.requests import Request
from starlette.responses import Response

from api_base.config import settings
from api_base.security.stores import CachedResponse, CacheStore, InMemoryCacheStore

logger = logging.getLogger(__name__)

CACHE_TTL_ATTR = "__cache_ttl__"
SKIP_CACHE_ATTR = "__skip_cache__"

RouteHandler = Callable[[Request], Coroutine[Any, Any, Response]]


# ── Endpoint markers ──────────────────────────────────────────────────────


def cache_response(ttl: Optional[int] = None) -> Callable:
    """
    Mark an endpoint as cacheable for `ttl` seconds. Returns the function unchanged.

    With no ttl the entry lives for settings.cache_default_ttl, read when
    the response is stored.
    """

    def decorator(func: Callable) -> Callable:
        setattr(func, CACHE_TTL_ATTR, ttl)
        return func

    return decorator


def skip_cache(func: Callable) -> Callable:
    setattr(func, SKIP_CACHE_ATTR, True)
    return func


def is_cacheable(endpoint: Callable) -> bool:
    return hasattr(endpoint, CACHE_TTL_ATTR) and not getattr(endpoint, SKIP_CACHE_ATTR, False)


# ── Cache facade ──────────────────────────────────────────────────────────


class ResponseCache:
    """
    Keying, TTL bookkeeping and invalidation on top of a CacheStore.

    Args:
        store:  Entry storage (in-memory by default)
        clock:  Returns epoch seconds; replaced in tests
        guard:  Optional predicate run before serving a HIT. When it returns
                False the request goes to the handler, whose dependencies then
                decide (e.g. reject a missing bearer token with 401).
    """

    def __init__(
        self,
        store: Optional[CacheStore] = None,
        clock: Callable[[], float] = time.time,
        guard: Optional[Callable[[Request], bool]] = None,
    ):
        self.store = store if store is not None else InMemoryCacheStore(clock=clock)
        self.guard = guard
        self._clock = clock

    @staticmethod
    def key_for(request: Request) -> str:
        query = urlencode(sorted(request.query_params.multi_items()))
        return f"{request.url.path}:{query}"

    async def lookup(self, key: str) -> Optional[CachedResponse]:
        return await self.store.get(key)

    async def save(self, key: str, entry: CachedResponse, ttl: int) -> None:
        entry.expires_at = self._clock() + ttl
        await self.store.set(key, entry, ttl)
        await self.store.purge_expired()

    def remaining_ttl(self, entry: CachedResponse) -> int:
        return max(0, math.ceil(entry.expires_at - self._clock()))

    async def invalidate(self, pattern: Optional[str] = None) -> int:
        """Drop entries whose key contains `pattern` (all entries when None)."""
        removed = await self.store.clear(pattern)
        if removed:
            logger.debug("Invalidated %d cached responses (pattern=%r)", removed, pattern)
        return removed

    async def serve(self, request: Request, handler: RouteHandler, ttl: int) -> Response:
        """Answer from the cache, or run the handler and store a 200 result."""
        key = self.key_for(request)
        cached = await self.lookup(key)
        if cached is not None and (self.guard is None or self.guard(request)):
            response = Response(
                content=cached.body,
                status_code=cached.status_code,
                headers=cached.headers,
                media_type=cached.media_type,
            )
            response.headers["X-Cache"] = "HIT"
            response.headers["X-Cache-TTL"] = str(self.remaining_ttl(cached))
            return response

        response = await handler(request)
        body = getattr(response, "body", None)
        if response.status_code != 200 or body is None:
            return response

        await self.save(
            key,
            CachedResponse(
                status_code=response.status_code,
                body=bytes(body),
                headers=dict(response.headers.items()),
                media_type=response.media_type,
            ),
            ttl,
        )
        response.headers["X-Cache"] = "MISS"
        response.headers["X-Cache-TTL"] = str(ttl)
        return response


# ── Route class ───────────────────────────────────────────────────────────


class CachedRoute(APIRoute):
    """
    APIRoute that puts the app's ResponseCache in front of marked GET endpoints.

    The decision is made once per route when FastAPI builds its handler, so
    requests never walk the routing table. Unmarked endpoints, @skip_cache
    endpoints and non-GET methods get the plain FastAPI handler.
    """

    def get_route_handler(self) -> RouteHandler:
        handler = super().get_route_handler()
        if "GET" not in self.methods or not is_cacheable(self.endpoint):
            return handler
        marked_ttl = getattr(self.endpoint, CACHE_TTL_ATTR)

        async def cached_handler(request: Request) -> Response:
            cache: Optional[ResponseCache] = getattr(request.app.state, "response_cache", None)
            if cache is None or request.method != "GET":
                return await handler(request)
            ttl = marked_ttl if marked_ttl is not None else settings.cache_default_ttl
            return await cache.serve(request, handler, ttl)

        return cached_handler
