"""
API Base — Request Validators
==============================

What:  The individual checks run by SecurityMiddleware.
Why:   Keeping each check a small method on RequestValidator lets tests hit a
       single rule (e.g. CR/LF in a header value) without building an HTTP
       request that a client library would refuse to send.
How:   Checks either return a bool (user agent, IP blacklist) or raise the
       matching SecurityViolation subclass.
"""

from typing import Any, Iterable, List, Optional, Tuple
from urllib.parse import unquote

from api_base.config import Settings
from api_base.security.exceptions import (
    CommandInjectionError,
    MalformedRequestError,
    PathTraversalError,
    PayloadTooLargeError,
    SuspiciousActivityError,
)
from api_base.security.patterns import (
    CONTROL_URL_PATTERNS,
    SUSPICIOUS_PATTERNS,
    SUSPICIOUS_USER_AGENTS,
    TRAVERSAL_URL_PATTERNS,
)
from api_base.security.service import SecurityService, security_service


class RequestValidator:
    """Stateless checks parameterised by Settings."""

    def __init__(self, settings: Settings, service: Optional[SecurityService] = None):
        self.settings = settings
        self.service = service or security_service

    # ── Connection metadata ───────────────────────────────────────────────

    def validate_host(self, host: str) -> None:
        """Host must equal an allowed entry, or share its hostname with any port."""
        if not host or not self._is_allowed_host(host, self.settings.allowed_hosts_list):
            raise SuspiciousActivityError.for_invalid_host(host or "<missing>")

    @staticmethod
    def _is_allowed_host(host: str, allowed_hosts: List[str]) -> bool:
        for allowed in allowed_hosts:
            if host == allowed or host.startswith(f"{allowed.split(':')[0]}:"):
                return True
        return False

    @staticmethod
    def is_suspicious_user_agent(user_agent: str) -> bool:
        lowered = (user_agent or "").lower()
        return any(agent in lowered for agent in SUSPICIOUS_USER_AGENTS)

    def is_blacklisted_ip(self, ip: str) -> bool:
        """
        Exact match against BLACKLISTED_IPS, else prefix match against
        BLACKLISTED_RANGES. A CIDR range a.b.c.d/n keeps the first n/8
        octets of the network address as the prefix.
        """
        if ip in self.settings.blacklisted_ips_list:
            return True
        for entry in self.settings.blacklisted_ranges_list:
            if "/" in entry:
                network, _, mask = entry.partition("/")
                if not network or not mask:
                    continue
                try:
                    octets = int(mask) // 8
                except ValueError:
                    continue
                prefix = ".".join(network.split(".")[:octets])
                if ip.startswith(prefix):
                    return True
            elif ip.startswith(entry):
                return True
        return False

    def validate_origin(self, origin: Optional[str]) -> None:
        if origin and origin not in self.settings.allowed_origins_list:
            raise SuspiciousActivityError.for_invalid_origin(origin)

    @staticmethod
    def validate_header_values(headers: Iterable[Tuple[str, str]]) -> None:
        for name, value in headers:
            if "\n" in value or "\r" in value:
                raise SuspiciousActivityError.for_header_injection(name)

    def validate_content_length(self, content_length: Optional[str]) -> None:
        try:
            size = int(content_length or "0")
        except ValueError:
            size = 0
        if size > self.settings.max_body_size:
            raise PayloadTooLargeError(size, self.settings.max_body_size)

    # ── Payload scanning ──────────────────────────────────────────────────

    def validate_value(self, value: Any, context: str) -> None:
        """Walk strings, lists (by index) and dicts (by key) depth-first."""
        if isinstance(value, str):
            self.validate_string(value, context)
        elif isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                self.validate_value(item, f"{context}[{index}]")
        elif isinstance(value, dict):
            for key, item in value.items():
                self.validate_value(item, f"{context}.{key}")

    def validate_string(self, value: str, context: str) -> None:
        if len(value) > self.settings.max_input_length:
            raise MalformedRequestError("Input too long", context)

        for pattern, violation in SUSPICIOUS_PATTERNS:
            if pattern.search(value):
                raise violation.create(context, value)

        if self.service.contains_os_commands(value):
            raise CommandInjectionError.create(context, value)

        if not self.service.is_valid_path(value):
            raise PathTraversalError.create(context, value)

    # ── URL ───────────────────────────────────────────────────────────────

    def validate_url(self, raw_url: str) -> None:
        """
        raw_url is the request target as sent (path + query, still encoded).
        Patterns run against one round of percent-decoding. The traversal
        fragment list is also checked against both the raw and the decoded
        form, which catches fully double-encoded sequences such as
        %252e%252e%252f. The length limit applies to the raw form.
        """
        decoded = unquote(raw_url)
        if any(pattern.search(decoded) for pattern in TRAVERSAL_URL_PATTERNS):
            raise PathTraversalError("Suspicious URL pattern detected", "URL path")
        if raw_url and not (
            self.service.is_valid_path(raw_url) and self.service.is_valid_path(decoded)
        ):
            raise PathTraversalError("Suspicious URL pattern detected", "URL path")
        if any(pattern.search(decoded) for pattern in CONTROL_URL_PATTERNS):
            raise MalformedRequestError("Suspicious URL pattern detected", "URL path")
        if len(raw_url) > self.settings.max_url_length:
            raise MalformedRequestError("URL too long")
