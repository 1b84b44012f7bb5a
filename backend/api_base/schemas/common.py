"""
Shared response models (health check, error envelope for OpenAPI docs).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """
    What:  Error envelope returned by every failing endpoint.

    Example:
        {
            "data": null,
            "message": "Example with ID 550e8400-... not found",
            "status": 404,
            "error": "not_found",
            "request_id": "a1b2c3d4"
        }
    """
    data: None = None
    message: str = Field(description="Human-readable error description")
    status: int = Field(description="HTTP status code")
    error: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    environment: str = Field(description="Runtime environment")
    security_enabled: bool = Field(
        alias="securityEnabled",
        description="Whether the request security filter validates requests",
    )
    uptime_seconds: float = Field(
        alias="uptimeSeconds",
        description="Seconds since service started",
    )

    model_config = ConfigDict(populate_by_name=True)
