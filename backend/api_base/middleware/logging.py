"""
API Base — Request Logging Middleware
======================================

What:  One access-log line per HTTP request.
Why:   Latency, status and caller are the first things needed when
       investigating an incident; slow requests are surfaced at WARNING.
How:   Measures wall time around call_next and logs on the "api_base.access"
       logger with the request ID for correlation.
When:  Right after RequestIDMiddleware, so rejections from the security
       filter are logged too.

Line format:
    GET /examples 200 12.3ms [a1b2c3d4] from 127.0.0.1 ua="curl/8.0"

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, IP, user-agent, request ID
    ❌ Don't log: request body, query values, Authorization or Cookie headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from api_base.middleware.request_id import request_id_var

logger = logging.getLogger("api_base.access")

SLOW_REQUEST_MS = 2000.0
SKIPPED_PATHS = {"/health"}


def client_ip_of(request: Request) -> str:
    """Socket peer address, then the first X-Forwarded-For entry, then "unknown"."""
    if request.client and request.client.host:
        return request.client.host
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    return first or "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status, duration, client IP and user agent.

    Level by outcome:
        5xx          → ERROR
        4xx          → WARNING
        > 2000 ms    → WARNING (slow request)
        otherwise    → INFO
    """

    def __init__(self, app, slow_request_ms: float = SLOW_REQUEST_MS, **kwargs):
        super().__init__(app, **kwargs)
        self.slow_request_ms = slow_request_ms

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        # Health probes run every few seconds; logging them buries real traffic
        if path in SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        slow = duration_ms > self.slow_request_ms
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400 or slow:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        client_ip = client_ip_of(request)
        user_agent = request.headers.get("user-agent", "")

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s ua=%r%s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            user_agent,
            " (slow request)" if slow else "",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_agent": user_agent,
            },
        )
        return response
