"""
API Base — Security Middleware
===============================

What:  Request filter that rejects hostile traffic and hardens every response.
Why:   Signature checks, rate limiting and host/origin pinning belong in one
       place in front of the routes, not repeated in every handler.
How:   Starlette BaseHTTPMiddleware. Checks run in a fixed order and stop at
       the first violation, which is turned into the error envelope here
       (exceptions raised inside middleware never reach FastAPI's handlers).

Check order:
    1. Host header allow-list                       → 400
    2. Fixed-window rate limit per client IP        → 429 + Retry-After
    3. Scanner user agents                          → 403
    4. Blacklisted IPs and ranges                   → 403
    5. Origin header allow-list                     → 403
    6. CR/LF in any header value                    → 400
    7. Content-Length above MAX_BODY_SIZE           → 413
    8. JSON/form body and query parameter scan      → 400
    9. Decoded URL signatures, then URL length      → 400

Development bypass:
    With ENVIRONMENT=development and SECURITY_ENABLED unset or false, the
    checks are skipped (logged at DEBUG, announced loudly at startup).
    Security headers are still applied in that mode.
"""

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qs

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from api_base.config import Settings, settings as default_settings
from api_base.middleware.logging import client_ip_of
from api_base.middleware.request_id import request_id_var
from api_base.responses import error_response
from api_base.security.exceptions import (
    RateLimitError,
    SecurityViolation,
    SuspiciousActivityError,
)
from api_base.security.rate_limit import FixedWindowRateLimiter
from api_base.security.validators import RequestValidator

logger = logging.getLogger("api_base.security")

# ── Response headers ──────────────────────────────────────────────────────

_CSP_TAIL = (
    "img-src 'self' data:; font-src 'self'; connect-src 'self'; media-src 'none'; "
    "object-src 'none'; child-src 'none'; worker-src 'none'; frame-ancestors 'none'; "
    "form-action 'self'; base-uri 'self'; manifest-src 'self'"
)
PRODUCTION_CSP = f"default-src 'self'; script-src 'self'; style-src 'self'; {_CSP_TAIL}"
DEVELOPMENT_CSP = (
    "default-src 'self'; script-src 'self' 'unsafe-inline'; "
    f"style-src 'self' 'unsafe-inline'; {_CSP_TAIL}"
)
# Swagger UI and ReDoc load their bundles from jsDelivr
DOCS_CSP = (
    "default-src 'self'; script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net https://fonts.googleapis.com; "
    "img-src 'self' data: https://fastapi.tiangolo.com https://cdn.redoc.ly; "
    "font-src 'self' https://fonts.gstatic.com; connect-src 'self'; worker-src 'self' blob:; "
    "object-src 'none'; frame-ancestors 'none'; base-uri 'self'"
)

SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Cross-Origin-Embedder-Policy": "require-corp",
    "Origin-Agent-Cluster": "?1",
    "Permissions-Policy": (
        "camera=(), microphone=(), geolocation=(), payment=(), usb=(), "
        "magnetometer=(), gyroscope=(), accelerometer=()"
    ),
    "X-Robots-Tag": "noindex, nofollow, noarchive, nosnippet, noimageindex",
}

STRIPPED_HEADERS = ("server", "x-powered-by")

BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def violation_response(exc: SecurityViolation, request_id: str = "") -> JSONResponse:
    """Error envelope for a security violation; details are always included."""
    headers = None
    if isinstance(exc, RateLimitError) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}
    return error_response(
        exc.message,
        exc.status_code,
        "security_violation",
        details=exc.security_details(),
        request_id=request_id,
        always_include_details=True,
        headers=headers,
    )


def log_violation(exc: SecurityViolation, request: Request, client_ip: str) -> None:
    logger.warning(
        "Security violation %s (%s) %s %s from %s [%s]: %s",
        exc.security_code,
        exc.severity,
        request.method,
        request.url.path,
        client_ip,
        request_id_var.get(""),
        exc.message,
        extra={
            "request_id": request_id_var.get(""),
            "client_ip": client_ip,
            "security_code": exc.security_code,
            "severity": exc.severity,
        },
    )


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Request security filter.

    Args:
        settings:      Limits, allow/block lists and environment flags
        rate_limiter:  Fixed-window limiter; built from settings when omitted
        validator:     Individual checks; built from settings when omitted
    """

    def __init__(
        self,
        app,
        settings: Optional[Settings] = None,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        validator: Optional[RequestValidator] = None,
        **kwargs,
    ):
        super().__init__(app, **kwargs)
        self.settings = settings or default_settings
        self.rate_limiter = rate_limiter if rate_limiter is not None else FixedWindowRateLimiter(
            max_requests=self.settings.rate_limit_max_requests,
            window_seconds=self.settings.rate_limit_window,
        )
        self.validator = validator if validator is not None else RequestValidator(self.settings)
        docs = "/" + self.settings.swagger_path.strip("/")
        self.docs_paths = {docs, f"{docs}/oauth2-redirect", "/redoc", "/openapi.json"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self.settings.security_bypassed:
            logger.debug(
                "[DEV MODE] Security validations DISABLED - %s %s",
                request.method,
                request.url.path,
            )
            response = await call_next(request)
        else:
            client_ip = client_ip_of(request)
            try:
                await self.validate(request, client_ip)
            except SecurityViolation as exc:
                log_violation(exc, request, client_ip)
                response = violation_response(exc, request_id_var.get(""))
            else:
                response = await call_next(request)

        self.apply_security_headers(request, response)
        return response

    # ── Checks ────────────────────────────────────────────────────────────

    async def validate(self, request: Request, client_ip: str) -> None:
        """Run every check in order; raises the first SecurityViolation found."""
        headers = request.headers
        self.validator.validate_host(headers.get("host", ""))

        decision = await self.rate_limiter.hit(client_ip)
        if not decision.allowed:
            raise RateLimitError.create(
                client_ip,
                self.rate_limiter.max_requests,
                self.rate_limiter.window_seconds,
                decision.retry_after,
            )

        user_agent = headers.get("user-agent", "")
        if self.validator.is_suspicious_user_agent(user_agent):
            raise SuspiciousActivityError.for_user_agent(user_agent)

        if self.validator.is_blacklisted_ip(client_ip):
            raise SuspiciousActivityError.for_blacklisted_ip(client_ip)

        self.validator.validate_origin(headers.get("origin"))
        self.validator.validate_header_values(headers.items())
        self.validator.validate_content_length(headers.get("content-length"))

        body = await self._parsed_body(request)
        if body is not None:
            self.validator.validate_value(body, "request body")

        query = self._query_params(request)
        if query:
            self.validator.validate_value(query, "query parameters")

        self.validator.validate_url(self._request_target(request))

    @staticmethod
    async def _parsed_body(request: Request) -> Optional[Any]:
        """
        Decoded JSON or urlencoded body, None when there is nothing to scan.

        Malformed JSON is left to the route's own validation.
        """
        if request.method not in BODY_METHODS:
            return None
        content_type = request.headers.get("content-type", "").lower()
        raw = await request.body()
        if not raw:
            return None
        if "application/json" in content_type:
            try:
                return json.loads(raw)
            except ValueError:
                return None
        if "application/x-www-form-urlencoded" in content_type:
            parsed = parse_qs(raw.decode("utf-8", errors="replace"), keep_blank_values=True)
            return {key: values[0] if len(values) == 1 else values for key, values in parsed.items()}
        return None

    @staticmethod
    def _query_params(request: Request) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        for key in request.query_params.keys():
            values = request.query_params.getlist(key)
            params[key] = values[0] if len(values) == 1 else values
        return params

    @staticmethod
    def _request_target(request: Request) -> str:
        """Path and query exactly as the client sent them (still percent-encoded)."""
        raw_path = request.scope.get("raw_path") or request.url.path.encode("utf-8")
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
        query = request.scope.get("query_string", b"").decode("latin-1")
        return f"{path}?{query}" if query else path

    # ── Headers ───────────────────────────────────────────────────────────

    def apply_security_headers(self, request: Request, response: Response) -> None:
        is_docs = request.url.path in self.docs_paths
        for name, value in SECURITY_HEADERS.items():
            if is_docs and name == "Cross-Origin-Embedder-Policy":
                continue
            response.headers[name] = value

        if is_docs:
            csp = DOCS_CSP
        elif self.settings.is_production:
            csp = PRODUCTION_CSP
        else:
            csp = DEVELOPMENT_CSP
        response.headers["Content-Security-Policy"] = csp

        for name in STRIPPED_HEADERS:
            if name in response.headers:
                del response.headers[name]
