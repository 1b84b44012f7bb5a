"""
API Base — Request Timeout Middleware
======================================

What:  Caps the time a request may spend in the route handler.
Why:   A stuck database call should free the client with a clear 408
       instead of holding the connection until the proxy gives up.
How:   asyncio.wait_for around call_next. On expiry the downstream task is
       cancelled and a 408 envelope "Request timeout after <ms>ms" is
       returned. Exceptions raised here would bypass FastAPI's handlers,
       so the envelope is built directly (same pattern as the security filter).
"""

import asyncio
import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from api_base.exceptions import RequestTimeoutError
from api_base.middleware.request_id import request_id_var
from api_base.responses import error_response

logger = logging.getLogger(__name__)


class TimeoutMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, timeout_seconds: float = 30.0, **kwargs):
        super().__init__(app, **kwargs)
        self.timeout_seconds = timeout_seconds

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            exc = RequestTimeoutError(self.timeout_seconds)
            logger.warning(
                "Request timed out: %s %s after %.0fms",
                request.method,
                request.url.path,
                self.timeout_seconds * 1000,
            )
            return error_response(
                exc.message,
                exc.status_code,
                exc.error,
                details=exc.context,
                request_id=request_id_var.get(""),
            )
