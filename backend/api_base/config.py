"""
API Base — Application Configuration
=====================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.

Settings are grouped by concern:
    app       → environment, host/port, log level, docs path
    database  → async SQLAlchemy URL, table sync, SQL echo
    security  → security filter toggles, allow/block lists, limits
    cors      → browser cross-origin policy
    jwt       → bearer-token verification for protected routes
"""

from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "your-super-secret-jwt-key-change-in-production"


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development-friendly defaults. Production deployments
    MUST override JWT_SECRET, ALLOWED_HOSTS and ALLOWED_ORIGINS.
    """

    # ── Application ───────────────────────────────────────────────────────
    app_env: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "APP_ENV"),
        description="Runtime environment: development, test, staging, production",
    )
    app_name: str = Field(default="API Base Project")
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = Field(default="INFO")

    # What: URL path where Swagger UI is mounted (ReDoc and the schema follow it)
    swagger_path: str = Field(default="docs")

    # ── Database ──────────────────────────────────────────────────────────
    # Format: sqlite+aiosqlite:///./file.sqlite or postgresql+asyncpg://user:pw@host/db
    database_url: str = Field(default="sqlite+aiosqlite:///./database.sqlite")
    database_sync: bool = Field(
        default=True,
        description="Create missing tables on startup (no migration tooling)",
    )
    database_logging: bool = Field(default=False)
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)

    # ── Security Filter ───────────────────────────────────────────────────
    # None means "not configured": the filter is then active everywhere
    # except in the development environment.
    security_enabled: Optional[bool] = Field(default=None)

    allowed_hosts: str = Field(default="localhost:3000,localhost,127.0.0.1:3000,127.0.0.1")
    allowed_origins: str = Field(default="http://localhost:3000,https://localhost:3000")
    blacklisted_ips: str = Field(default="")
    blacklisted_ranges: str = Field(default="")

    # Fixed window: 100 requests per 15 minutes per client IP
    rate_limit_window: int = Field(default=900, ge=1, le=86400)  # seconds
    rate_limit_max_requests: int = Field(default=100, ge=1, le=100000)

    max_body_size: int = Field(default=1_048_576, ge=1024)  # bytes
    max_input_length: int = Field(default=10_000, ge=1)  # characters per string
    max_url_length: int = Field(default=2048, ge=64)
    request_timeout: float = Field(default=30.0, gt=0)  # seconds
    cache_default_ttl: int = Field(default=60, ge=1)  # seconds, for @cache_response() without a ttl

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")
    cors_allow_credentials: bool = Field(default=True)

    # ── JWT ───────────────────────────────────────────────────────────────
    auth_enabled: bool = Field(
        default=False,
        description="Require a bearer token on the Example routes",
    )
    jwt_secret: str = Field(default=DEV_JWT_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    jwt_issuer: str = Field(default="api-base-project")
    jwt_audience: str = Field(default="api-base-project-users")
    jwt_access_expires_minutes: int = Field(default=15, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        valid_envs = {"development", "test", "staging", "production"}
        lower = v.lower()
        if lower not in valid_envs:
            raise ValueError(f"Invalid environment '{v}'. Must be one of: {valid_envs}")
        return lower

    # ── Derived values ────────────────────────────────────────────────────

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def security_active(self) -> bool:
        """
        Whether the request security filter validates requests.

        Resolution order: explicit SECURITY_ENABLED, otherwise enabled in
        every environment except development.
        """
        if self.security_enabled is not None:
            return self.security_enabled
        return not self.is_development

    @property
    def security_bypassed(self) -> bool:
        """True only in development with the filter switched off."""
        return self.is_development and not self.security_active

    @property
    def allowed_hosts_list(self) -> List[str]:
        return _split_csv(self.allowed_hosts)

    @property
    def allowed_origins_list(self) -> List[str]:
        return _split_csv(self.allowed_origins)

    @property
    def blacklisted_ips_list(self) -> List[str]:
        return _split_csv(self.blacklisted_ips)

    @property
    def blacklisted_ranges_list(self) -> List[str]:
        return _split_csv(self.blacklisted_ranges)

    @property
    def cors_origins_list(self) -> List[str]:
        return _split_csv(self.cors_origins)

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        Why:   Fail fast with clear error messages instead of shipping a
               deployment that signs tokens with a public secret.
        """
        if not self.is_production:
            return
        errors = []
        if self.jwt_secret == DEV_JWT_SECRET:
            errors.append("JWT_SECRET is still the development default.")
        if self.security_enabled is False:
            errors.append("SECURITY_ENABLED=false is not allowed in production.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
