"""
Signature lists used by the request security filter.

Each content pattern is tagged with the violation class it raises so the
filter can report an SQL-injection match differently from an XSS match.
Patterns are evaluated in order; the first match wins.
"""

import re
from typing import List, Tuple, Type

from api_base.security.exceptions import (
    CommandInjectionError,
    PathTraversalError,
    SecurityViolation,
    SqlInjectionError,
    XssError,
)

# ── Content signatures ────────────────────────────────────────────────────
# Applied to every string found in the body and query parameters.
SUSPICIOUS_PATTERNS: List[Tuple[re.Pattern, Type[SecurityViolation]]] = [
    (re.compile(r"('|(\\x27)|(\\x2D\\x2D)|('))", re.IGNORECASE), SqlInjectionError),
    (
        re.compile(r"(union|select|insert|delete|update|drop|create|alter|exec|execute)", re.IGNORECASE),
        SqlInjectionError,
    ),
    (re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE), XssError),
    (re.compile(r"<iframe[^>]*>.*?</iframe>", re.IGNORECASE), XssError),
    (re.compile(r"javascript:", re.IGNORECASE), XssError),
    (re.compile(r"on\w+\s*=", re.IGNORECASE), XssError),
    (re.compile(r"[;&|`$<>(){}\[\]\\'\"]"), CommandInjectionError),
    (re.compile(r"\.\./"), PathTraversalError),
]

# ── URL signatures ────────────────────────────────────────────────────────
# Applied to the percent-decoded request target (path + query).
TRAVERSAL_URL_PATTERNS: List[re.Pattern] = [
    re.compile(r"\.\.[/\\]"),
    re.compile(r"%2e%2e[/\\]", re.IGNORECASE),
    re.compile(r"%252e%252e[/\\]", re.IGNORECASE),
]

CONTROL_URL_PATTERNS: List[re.Pattern] = [
    re.compile(r"\x00"),
    re.compile(r"%00", re.IGNORECASE),
    re.compile(r"[\x00-\x1f\x7f-\x9f]"),
]

# ── Scanner user agents ───────────────────────────────────────────────────
SUSPICIOUS_USER_AGENTS: List[str] = [
    "sqlmap",
    "nikto",
    "burp",
    "w3af",
    "acunetix",
    "netsparker",
    "havij",
    "pangolin",
    "nmap",
    "hydra",
    "medusa",
    "brutus",
    "gobuster",
    "dirb",
    "dirbuster",
    "wfuzz",
    "ffuf",
]

# ── Path traversal fragments (plain substring search, lowercased input) ───
TRAVERSAL_FRAGMENTS: List[str] = [
    "../",
    "..\\",
    "..\\/",
    "../\\",
    "%2e%2e%2f",
    "%2e%2e%5c",
    "%2e%2e/",
    "..%2f",
    "..%5c",
    "%252e%252e%252f",
]

# ── OS commands recognised as standalone words ────────────────────────────
OS_COMMANDS: List[str] = [
    "rm", "del", "delete", "mkdir", "rmdir", "mv", "cp", "cat", "ls", "dir",
    "chmod", "chown", "sudo", "su", "passwd", "kill", "killall", "ps",
    "wget", "curl", "nc", "netcat", "ssh", "scp", "ftp", "telnet", "ping",
    "nslookup", "dig", "whoami", "id", "uname", "which", "locate", "find",
    "grep", "awk", "sed", "sort", "head", "tail", "tar", "zip", "unzip",
    "gzip", "gunzip", "python", "node", "npm", "pip", "bash", "sh", "zsh",
    "csh", "tcsh", "fish", "powershell", "cmd", "net", "tasklist",
    "taskkill", "systemctl", "service", "crontab", "at",
]

DANGEROUS_CHARS = re.compile(r"[;&|`$<>(){}\[\]\\'\"]")
