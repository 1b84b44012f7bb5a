"""
API Base — Middleware Package
==============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (execution order):
    Request → [Request ID] → [Logging] → [Security] → [Timeout] → [CORS] → Route

    1. Request ID first: every later log line and error envelope carries it
    2. Logging: sees the final status, including security rejections
    3. Security (api_base.security.middleware): rejects hostile requests early
    4. Timeout: bounds handler time with a 408 envelope
    5. CORS: FastAPI's CORSMiddleware (handles preflight)

    The response cache (cache.py) is not a middleware: routers opt in with
    route_class=CachedRoute and GET hits are served inside the route, after
    FastAPI has matched it.

    Starlette runs the LAST added middleware first, so create_app() adds
    them in reverse.
"""
