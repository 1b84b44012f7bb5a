"""
API Base — Request ID Middleware
=================================

What:  Assigns a correlation ID to each request and echoes it in the response.
Why:   Every log line, error envelope and security event for one request
       shares the same ID, so a client can quote it in a bug report.
How:   Reuses the client's X-Request-ID when present, otherwise generates a
       short UUID. The value lives in a ContextVar (coroutine-local) and on
       request.state.
When:  Outermost middleware; runs before logging and the security filter.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


def generate_request_id() -> str:
    # 8 hex chars are enough for correlation and stay readable in logs
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reads or creates X-Request-ID, stores it, and returns it on the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
