"""
API Base — Security Service
============================

What:  Stateless string heuristics shared by the security filter and routes.
Why:   Keeps the detection rules in one place so the middleware, handlers
       and tests agree on what counts as an OS command or a traversal path.
How:   Plain functions over strings backed by the signature lists in
       api_base.security.patterns. No I/O, no shared state.

Operations:
    sanitize_input        strip shell metacharacters, collapse whitespace, cap at 1000 chars
    contains_os_commands  word-boundary match against a fixed command list
    generate_secure_hash  SHA-256 hex digest
    is_valid_path         reject traversal fragments (and empty input)
"""

import hashlib
import re
from typing import Any, List

from api_base.security.patterns import DANGEROUS_CHARS, OS_COMMANDS, TRAVERSAL_FRAGMENTS

SANITIZED_MAX_LENGTH = 1000

_WHITESPACE = re.compile(r"\s+")


def _command_patterns(command: str) -> List[re.Pattern]:
    cmd = re.escape(command)
    return [
        re.compile(rf"^{cmd}\s"),
        re.compile(rf"\s{cmd}\s"),
        re.compile(rf"[;&|]{cmd}\s"),
        re.compile(rf"^{cmd}$"),
        re.compile(rf"\s{cmd}$"),
    ]


class SecurityService:
    """Input heuristics for the security filter."""

    def __init__(self, commands: List[str] = OS_COMMANDS):
        self._command_patterns = [p for command in commands for p in _command_patterns(command)]

    def sanitize_input(self, value: Any) -> str:
        """
        Remove characters with special meaning to shells and markup.

        Non-string or empty input yields "". The result is whitespace
        collapsed, trimmed and truncated to 1000 characters.
        """
        if not value or not isinstance(value, str):
            return ""
        cleaned = DANGEROUS_CHARS.sub("", value)
        cleaned = _WHITESPACE.sub(" ", cleaned).strip()
        return cleaned[:SANITIZED_MAX_LENGTH]

    def contains_os_commands(self, value: Any) -> bool:
        """Case-insensitive check for a known OS command used as a standalone word."""
        if not value or not isinstance(value, str):
            return False
        lowered = value.lower()
        return any(pattern.search(lowered) for pattern in self._command_patterns)

    def generate_secure_hash(self, data: str) -> str:
        return hashlib.sha256(data.encode("utf-8")).hexdigest()

    def is_valid_path(self, value: Any) -> bool:
        """
        False when the value contains a traversal fragment.

        Empty and non-string values are also reported as invalid, so an empty
        string anywhere in a scanned body is rejected.
        """
        if not value or not isinstance(value, str):
            return False
        lowered = value.lower()
        return not any(fragment in lowered for fragment in TRAVERSAL_FRAGMENTS)


# Singleton instance used by the middleware
security_service = SecurityService()
