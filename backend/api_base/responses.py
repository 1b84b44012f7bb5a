"""
API Base — Response Envelope
=============================

What:  The uniform JSON shape returned by every endpoint.
Why:   Clients parse one structure for success and failure alike:

           {"data": ..., "message": "...", "status": 200, "details": {...}}

How:   Routes return ApiResponse[...] models. Exception handlers and
       middleware build error bodies through `error_content()` so both paths
       produce the same keys, plus `error` (machine code) and `request_id`.

Details policy:
    `details` is emitted only in development, except where the caller forces
    it (validation errors and security violations always carry theirs).
"""

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from api_base.config import settings

T = TypeVar("T")

DEFAULT_MESSAGE = "Operation completed successfully"


class ApiResponse(BaseModel, Generic[T]):
    """Envelope model used as `response_model` by the routes."""

    data: Optional[T] = Field(default=None, description="Response data")
    message: str = Field(default=DEFAULT_MESSAGE, examples=[DEFAULT_MESSAGE])
    status: int = Field(default=200, description="HTTP status code", examples=[200])
    details: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Additional details (only in development)",
    )

    @classmethod
    def success(
        cls,
        data: Any = None,
        message: str = DEFAULT_MESSAGE,
        status: int = 200,
    ) -> "ApiResponse":
        return cls(data=data, message=message, status=status)

    @classmethod
    def error(
        cls,
        message: str,
        status: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> "ApiResponse":
        return cls(
            data=None,
            message=message,
            status=status,
            details=details if details and settings.is_development else None,
        )


def default_message(method: str, status: int, data: Any = None) -> str:
    """Message chosen from the HTTP method when a route does not set one."""
    method = method.upper()
    if method == "POST":
        return "Resource created successfully" if status == 201 else DEFAULT_MESSAGE
    if method == "GET":
        if isinstance(data, (list, tuple)):
            return "Resources retrieved successfully"
        return "Resource retrieved successfully"
    if method in ("PUT", "PATCH"):
        return "Resource updated successfully"
    if method == "DELETE":
        return "Resource deleted successfully"
    return DEFAULT_MESSAGE


def error_content(
    message: str,
    status: int,
    error: str,
    details: Optional[Dict[str, Any]] = None,
    request_id: str = "",
    always_include_details: bool = False,
) -> Dict[str, Any]:
    """Dict body for an error envelope (see module docstring for the policy)."""
    content: Dict[str, Any] = {
        "data": None,
        "message": message,
        "status": status,
        "error": error,
        "request_id": request_id,
    }
    if details and (always_include_details or settings.is_development):
        content["details"] = details
    return content


def error_response(
    message: str,
    status: int,
    error: str,
    details: Optional[Dict[str, Any]] = None,
    request_id: str = "",
    always_include_details: bool = False,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=error_content(message, status, error, details, request_id, always_include_details),
        headers=headers,
    )
