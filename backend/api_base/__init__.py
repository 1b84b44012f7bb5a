"""
API Base — Application Package Initializer
===========================================

What: Marks the `api_base` directory as a Python package.
Why:  Enables module imports like `from api_base.config import settings`.
Who:  Used by uvicorn (`python -m api_base`), pytest and the seeder CLI.

Architecture Note:
    ┌─────────────────────────────────────┐
    │   Middleware (RequestID, Logging,   │  ← cross-cutting HTTP concerns
    │   Security, Timeout, CORS)          │
    ├─────────────────────────────────────┤
    │   Routes (API Layer, CachedRoute)   │  ← HTTP concerns, GET caching
    ├─────────────────────────────────────┤
    │   Commands / Queries (Services)     │  ← business rules
    ├─────────────────────────────────────┤
    │           Repositories              │  ← SQLAlchemy queries
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
