"""
API Base — FastAPI Application Factory
=======================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, exception
       handling and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
       Shared state (rate-limit counters, response cache) is created per app
       or injected by the caller.
Who:   uvicorn (`python -m api_base` or `uvicorn api_base.main:app`) and tests.

Application Architecture:
    ┌───────────────────────────────────────────────────────────────┐
    │                          FastAPI App                          │
    │                                                               │
    │  Middleware Chain (execution order):                          │
    │  RequestID → Logging → Security → Timeout → CORS → Routes     │
    │  (GET responses are cached at the route layer, CachedRoute)   │
    │                                                               │
    │  Routes:                                                      │
    │  /examples (CRUD)                     GET /health             │
    │                                                               │
    │  Exception Handlers:                                          │
    │  RequestValidation→400 │ AppError→own status │ Security→own   │
    │  HTTPException→own status │ Exception→500                     │
    └───────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → production config check → table creation
              (DATABASE_SYNC) → security configuration summary
    Shutdown: dispose database engine
"""

import logging
import sys
import traceback
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from http import HTTPStatus
from typing import AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api_base import __version__
from api_base.auth import request_is_authorized
from api_base.config import settings
from api_base.database import create_tables, dispose_engine
from api_base.exceptions import AppError
from api_base.middleware.cache import ResponseCache
from api_base.middleware.logging import RequestLoggingMiddleware, client_ip_of
from api_base.middleware.request_id import RequestIDMiddleware, request_id_var
from api_base.middleware.timeout import TimeoutMiddleware
from api_base.responses import error_response
from api_base.routes import examples, health
from api_base.security.exceptions import SecurityViolation
from api_base.security.middleware import SecurityMiddleware, log_violation, violation_response
from api_base.security.patterns import SUSPICIOUS_USER_AGENTS
from api_base.security.rate_limit import FixedWindowRateLimiter
from api_base.security.stores import CacheStore, RateLimitStore

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = ("authorization", "cookie", "x-api-key", "x-auth-token", "x-access-token")


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Called once during startup. Access lines come from "api_base.access",
    security rejections from "api_base.security".
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_logging else logging.WARNING
    )
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_security_summary() -> None:
    """Startup banner describing what the security filter will enforce."""
    logger.info("Security configuration:")
    logger.info("  Environment: %s", settings.app_env)
    logger.info("  Security filter: %s", "DISABLED" if settings.security_bypassed else "ENABLED")
    logger.info("  Allowed hosts: %s", ", ".join(settings.allowed_hosts_list) or "<none>")
    logger.info("  Allowed origins: %s", ", ".join(settings.allowed_origins_list) or "<none>")
    logger.info(
        "  Rate limit: %d requests per %ds per client IP",
        settings.rate_limit_max_requests,
        settings.rate_limit_window,
    )
    logger.info(
        "  Blacklist: %d IPs, %d ranges",
        len(settings.blacklisted_ips_list),
        len(settings.blacklisted_ranges_list),
    )
    logger.info("  Suspicious user agents: %d patterns blocked", len(SUSPICIOUS_USER_AGENTS))
    logger.info("  Auth on /examples: %s", "required" if settings.auth_enabled else "off")

    if settings.security_bypassed:
        logger.warning("!" * 60)
        logger.warning("SECURITY FILTER DISABLED (ENVIRONMENT=development)")
        logger.warning("Requests are NOT checked for injection, rate limits or hosts.")
        logger.warning("Set SECURITY_ENABLED=true to test the filter locally.")
        logger.warning("!" * 60)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("%s v%s starting up...", settings.app_name, __version__)

    # Fail fast: refusing to start beats serving with a public JWT secret
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    if settings.database_sync:
        await create_tables()

    log_security_summary()
    logger.info("Server ready at http://%s:%d", settings.app_host, settings.app_port)
    logger.info("API docs: http://%s:%d/%s", settings.app_host, settings.app_port, settings.swagger_path)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("%s shutting down...", settings.app_name)
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def format_validation_errors(errors: List[dict]) -> Dict[str, List[str]]:
    """
    Group pydantic errors by field: {"name": ["..."], "general": ["..."]}.

    The location prefix (body/query/path) is dropped; nested fields are
    joined with dots.
    """
    formatted: Dict[str, List[str]] = defaultdict(list)
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header", "cookie"):
            loc = loc[1:]
        field = ".".join(loc) or "general"
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        formatted[field].append(message)
    return dict(formatted)


def sanitize_headers(headers) -> Dict[str, str]:
    sanitized = dict(headers)
    for name in SENSITIVE_HEADERS:
        if name in sanitized:
            sanitized[name] = "[REDACTED]"
    return sanitized


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        RequestValidationError  → 400 with field-level validationErrors
        AppError (+ subclasses) → the exception's own status and error code
        SecurityViolation       → same envelope as the security middleware
        HTTPException           → its status (404 unknown route, 405, ...)
        Exception (fallback)    → 500; debug details outside production
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        validation_errors = format_validation_errors(exc.errors())
        logger.warning("[%s] Request validation failed: %s", rid, validation_errors)
        return error_response(
            "Request validation failed",
            400,
            "validation_error",
            details={
                "validationErrors": validation_errors,
                "suggestion": "Please check the required fields and their formats.",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            request_id=rid,
            always_include_details=True,
        )

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            # Full context stays server-side
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return error_response(
            exc.message,
            exc.status_code,
            exc.error,
            details=exc.context,
            request_id=rid,
        )

    @app.exception_handler(SecurityViolation)
    async def handle_security_violation(request: Request, exc: SecurityViolation):
        log_violation(exc, request, client_ip_of(request))
        return violation_response(exc, request_id_var.get(""))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        try:
            error = HTTPStatus(exc.status_code).phrase.lower().replace(" ", "_")
        except ValueError:
            error = "http_error"
        return error_response(
            str(exc.detail),
            exc.status_code,
            error,
            request_id=request_id_var.get(""),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Production: generic message only. Elsewhere the envelope carries the
        exception type, message, stack trace, path, method and the request
        headers with credentials redacted.
        """
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)

        details: Optional[dict] = None
        if not settings.is_production:
            details = {
                "type": type(exc).__name__,
                "message": str(exc),
                "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
                "path": request.url.path,
                "method": request.method,
                "headers": sanitize_headers(request.headers),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        return error_response(
            "An unexpected error occurred. Please try again or contact support.",
            500,
            "internal_server_error",
            details=details,
            request_id=rid,
            always_include_details=details is not None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    rate_limit_store: Optional[RateLimitStore] = None,
    cache_store: Optional[CacheStore] = None,
    rate_limiter: Optional[FixedWindowRateLimiter] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        rate_limit_store:  Counter store for the security filter (in-memory default)
        cache_store:       Store for cached GET responses (in-memory default)
        rate_limiter:      Fully configured limiter; overrides rate_limit_store

    Each call builds fresh stores unless they are passed in, so tests get
    isolated state per app instance.
    """
    docs_path = "/" + settings.swagger_path.strip("/")
    app = FastAPI(
        title=settings.app_name,
        description=(
            "HTTP API starter with an Example CRUD resource, request security "
            "filtering, response caching and a uniform response envelope."
        ),
        version=__version__,
        docs_url=docs_path,
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    limiter = rate_limiter if rate_limiter is not None else FixedWindowRateLimiter(
        store=rate_limit_store,
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window,
    )
    response_cache = ResponseCache(cache_store, guard=request_is_authorized)
    app.state.response_cache = response_cache
    app.state.rate_limiter = limiter

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition. Adding
    # CORS → Timeout → Security → Logging → RequestID gives the
    # execution order RequestID → Logging → Security → Timeout → CORS.
    # The response cache sits behind CORS, inside the /examples routes.

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Cache", "X-Cache-TTL", "Retry-After"],
    )

    app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout)

    app.add_middleware(SecurityMiddleware, settings=settings, rate_limiter=limiter)

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(examples.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `api_base.main:app` to be importable
app = create_app()
