"""
API Base — Security Violation Exceptions
=========================================

What:  Exception types raised when a request matches an attack heuristic.
Why:   Every rejection carries a security code and a severity so that logs
       and clients can tell an SQL-injection signature from a rate-limit hit
       without parsing messages.
How:   SecurityViolation stores status, code, severity and a UTC timestamp.
       Subclasses fix the code/severity and offer `create()` constructors
       that quote the first 50 characters of the offending value.

Codes:
    SEC_001_SQL_INJECTION        400  HIGH
    SEC_002_XSS_ATTEMPT          400  HIGH
    SEC_003_COMMAND_INJECTION    400  CRITICAL
    SEC_004_PATH_TRAVERSAL       400  HIGH
    SEC_005_RATE_LIMIT           429  MEDIUM
    SEC_006_SUSPICIOUS_ACTIVITY  403  HIGH (400 for host/header checks)
    SEC_007_MALFORMED_REQUEST    400  MEDIUM
    SEC_008_PAYLOAD_TOO_LARGE    413  MEDIUM
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

SEVERITIES = ("LOW", "MEDIUM", "HIGH", "CRITICAL")
VIOLATION_TYPE = "SECURITY_VIOLATION"


def _with_context(message: str, context: Optional[str]) -> str:
    return f"{message} in {context}" if context else message


class SecurityViolation(Exception):
    """
    Base class for every security rejection.

    Attributes:
        message:        Human-readable reason (returned to the client)
        status_code:    HTTP status of the rejection
        security_code:  Short category identifier (SEC_xxx_...)
        severity:       LOW | MEDIUM | HIGH | CRITICAL
        timestamp:      UTC ISO-8601 time the violation was detected
        context:        Extra data for server-side logs
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        security_code: str,
        severity: str = "MEDIUM",
        context: Optional[Dict[str, Any]] = None,
    ):
        if severity not in SEVERITIES:
            raise ValueError(f"Unknown severity '{severity}'")
        self.message = message
        self.status_code = status_code
        self.security_code = security_code
        self.severity = severity
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def security_details(self) -> Dict[str, Any]:
        return {
            "securityCode": self.security_code,
            "severity": self.severity,
            "timestamp": self.timestamp,
            "type": VIOLATION_TYPE,
        }


class SqlInjectionError(SecurityViolation):
    def __init__(self, message: str = "SQL injection attempt detected", context: Optional[str] = None):
        super().__init__(_with_context(message, context), 400, "SEC_001_SQL_INJECTION", "HIGH")

    @classmethod
    def create(cls, context: str, suspicious: Optional[str] = None) -> "SqlInjectionError":
        if suspicious:
            return cls(f'SQL injection pattern detected: "{suspicious[:50]}..."', context)
        return cls(context=context)


class XssError(SecurityViolation):
    def __init__(self, message: str = "Cross-Site Scripting attempt detected", context: Optional[str] = None):
        super().__init__(_with_context(message, context), 400, "SEC_002_XSS_ATTEMPT", "HIGH")

    @classmethod
    def create(cls, context: str, suspicious: Optional[str] = None) -> "XssError":
        if suspicious:
            return cls(f'XSS pattern detected: "{suspicious[:50]}..."', context)
        return cls(context=context)


class CommandInjectionError(SecurityViolation):
    def __init__(self, message: str = "Command injection attempt detected", context: Optional[str] = None):
        super().__init__(_with_context(message, context), 400, "SEC_003_COMMAND_INJECTION", "CRITICAL")

    @classmethod
    def create(cls, context: str, suspicious: Optional[str] = None) -> "CommandInjectionError":
        if suspicious:
            return cls(f'OS command injection detected: "{suspicious[:50]}..."', context)
        return cls(context=context)


class PathTraversalError(SecurityViolation):
    def __init__(self, message: str = "Path traversal attempt detected", context: Optional[str] = None):
        super().__init__(_with_context(message, context), 400, "SEC_004_PATH_TRAVERSAL", "HIGH")

    @classmethod
    def create(cls, context: str, suspicious: Optional[str] = None) -> "PathTraversalError":
        if suspicious:
            return cls(f'Directory traversal detected: "{suspicious[:50]}..."', context)
        return cls(context=context)


class RateLimitError(SecurityViolation):
    """Client exceeded the fixed-window request budget; carries Retry-After."""

    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[int] = None):
        full_message = f"{message}. Try again in {retry_after} seconds" if retry_after else message
        super().__init__(
            full_message,
            429,
            "SEC_005_RATE_LIMIT",
            "MEDIUM",
            context={"retry_after": retry_after} if retry_after else None,
        )
        self.retry_after = retry_after

    @classmethod
    def create(cls, ip: str, limit: int, window_seconds: int, retry_after: Optional[int] = None) -> "RateLimitError":
        return cls(
            f"Rate limit exceeded for IP {ip}. Maximum {limit} requests per {window_seconds}s allowed",
            retry_after,
        )

    def security_details(self) -> Dict[str, Any]:
        details = super().security_details()
        if self.retry_after:
            details["retryAfter"] = self.retry_after
        return details


class SuspiciousActivityError(SecurityViolation):
    """Request metadata (agent, IP, host, origin, headers) looks hostile."""

    def __init__(
        self,
        message: str = "Suspicious activity detected",
        context: Optional[str] = None,
        status_code: int = 403,
    ):
        full_message = f"{message}: {context}" if context else message
        super().__init__(full_message, status_code, "SEC_006_SUSPICIOUS_ACTIVITY", "HIGH")

    @classmethod
    def for_user_agent(cls, user_agent: str) -> "SuspiciousActivityError":
        return cls("Suspicious user agent detected", f"User-Agent: {user_agent[:100]}")

    @classmethod
    def for_blacklisted_ip(cls, ip: str) -> "SuspiciousActivityError":
        return cls("Access denied from blacklisted IP", f"IP: {ip}")

    @classmethod
    def for_invalid_host(cls, host: str) -> "SuspiciousActivityError":
        return cls("Invalid host header", f"Host: {host}", status_code=400)

    @classmethod
    def for_invalid_origin(cls, origin: str) -> "SuspiciousActivityError":
        return cls("Invalid origin header", f"Origin: {origin[:100]}")

    @classmethod
    def for_header_injection(cls, header: str) -> "SuspiciousActivityError":
        return cls(
            "Header injection attempt detected",
            f"Header contains invalid characters: {header[:50]}",
            status_code=400,
        )


class MalformedRequestError(SecurityViolation):
    """Oversized string input or URL."""

    def __init__(self, message: str = "Malformed request", context: Optional[str] = None):
        super().__init__(_with_context(message, context), 400, "SEC_007_MALFORMED_REQUEST", "MEDIUM")


class PayloadTooLargeError(SecurityViolation):
    def __init__(self, size: int, limit: int):
        super().__init__(
            "Request entity too large",
            413,
            "SEC_008_PAYLOAD_TOO_LARGE",
            "MEDIUM",
            context={"content_length": size, "max_body_size": limit},
        )
