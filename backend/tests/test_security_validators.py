"""
API Base — Request Validator Tests
===================================

What we test:
    ✅ Host allow-list (exact entry or same hostname with any port)
    ✅ Scanner user agents, blacklisted IPs and CIDR-style ranges
    ✅ Origin allow-list and CR/LF header injection
    ✅ Content-Length limit → 413
    ✅ Body/query scanning: rule order, nested contexts, length limit
    ✅ URL signatures after percent-decoding, fully double-encoded traversal, URL length

Header injection and literal "../" URLs are tested here because HTTP
clients refuse to send (or normalize away) such requests.
"""

import pytest

from api_base.config import Settings
from api_base.security.exceptions import (
    CommandInjectionError,
    MalformedRequestError,
    PathTraversalError,
    PayloadTooLargeError,
    SqlInjectionError,
    SuspiciousActivityError,
    XssError,
)
from api_base.security.validators import RequestValidator


def build_settings(**overrides) -> Settings:
    values = dict(
        allowed_hosts="example.com,api.example.com:8443",
        allowed_origins="https://app.example.com",
        blacklisted_ips="10.0.0.5",
        blacklisted_ranges="192.168.1.0/24,172.16.",
        max_body_size=2048,
        max_input_length=50,
        max_url_length=100,
    )
    values.update(overrides)
    return Settings(**values)


class TestConnectionChecks:
    def setup_method(self):
        self.validator = RequestValidator(build_settings())

    @pytest.mark.parametrize("host", ["example.com", "example.com:8080", "api.example.com:9000"])
    def test_allowed_hosts(self, host):
        self.validator.validate_host(host)

    def test_unknown_host_rejected_with_400(self):
        with pytest.raises(SuspiciousActivityError) as exc_info:
            self.validator.validate_host("evil.com")
        assert exc_info.value.status_code == 400
        assert exc_info.value.security_code == "SEC_006_SUSPICIOUS_ACTIVITY"
        assert "Host: evil.com" in exc_info.value.message

    def test_missing_host_rejected(self):
        with pytest.raises(SuspiciousActivityError) as exc_info:
            self.validator.validate_host("")
        assert "<missing>" in exc_info.value.message

    @pytest.mark.parametrize("agent", ["sqlmap/1.7", "Mozilla/5.0 (Nikto)", "gobuster/3.1"])
    def test_scanner_user_agents(self, agent):
        assert RequestValidator.is_suspicious_user_agent(agent) is True

    @pytest.mark.parametrize("agent", ["Mozilla/5.0", "python-httpx/0.27", ""])
    def test_regular_user_agents(self, agent):
        assert RequestValidator.is_suspicious_user_agent(agent) is False

    def test_exact_blacklisted_ip(self):
        assert self.validator.is_blacklisted_ip("10.0.0.5") is True
        assert self.validator.is_blacklisted_ip("10.0.0.6") is False

    def test_cidr_range_uses_whole_octets(self):
        assert self.validator.is_blacklisted_ip("192.168.1.77") is True
        assert self.validator.is_blacklisted_ip("192.168.2.1") is False

    def test_plain_prefix_range(self):
        assert self.validator.is_blacklisted_ip("172.16.5.4") is True
        assert self.validator.is_blacklisted_ip("172.17.0.1") is False

    def test_origin_checks(self):
        self.validator.validate_origin(None)
        self.validator.validate_origin("https://app.example.com")
        with pytest.raises(SuspiciousActivityError) as exc_info:
            self.validator.validate_origin("https://evil.example")
        assert exc_info.value.status_code == 403

    def test_header_values_with_crlf_rejected(self):
        with pytest.raises(SuspiciousActivityError) as exc_info:
            RequestValidator.validate_header_values(
                [("accept", "application/json"), ("x-note", "a\r\nSet-Cookie: x")]
            )
        assert exc_info.value.status_code == 400
        assert "x-note" in exc_info.value.message

    def test_content_length_limit(self):
        self.validator.validate_content_length(None)
        self.validator.validate_content_length("2048")
        self.validator.validate_content_length("not-a-number")
        with pytest.raises(PayloadTooLargeError) as exc_info:
            self.validator.validate_content_length("4096")
        assert exc_info.value.status_code == 413
        assert exc_info.value.message == "Request entity too large"


class TestPayloadScanning:
    def setup_method(self):
        self.validator = RequestValidator(build_settings())

    @pytest.mark.parametrize(
        "value, violation",
        [
            ("x' OR 1=1", SqlInjectionError),
            ("DROP TABLE users", SqlInjectionError),
            ("<script>alert(1)</script>", XssError),
            ("javascript:void", XssError),
            ("hello; world", CommandInjectionError),
            ("sudo reboot", CommandInjectionError),
            ("../secret", PathTraversalError),
        ],
    )
    def test_first_matching_rule_wins(self, value, violation):
        with pytest.raises(violation):
            self.validator.validate_string(value, "request body.name")

    def test_message_quotes_input_and_context(self):
        with pytest.raises(SqlInjectionError) as exc_info:
            self.validator.validate_value(
                {"items": ["plain value", "x' OR 1=1"]}, "request body"
            )
        message = exc_info.value.message
        assert message.startswith('SQL injection pattern detected: "x\' OR 1=1..."')
        assert message.endswith("in request body.items[1]")

    def test_non_string_values_are_ignored(self):
        self.validator.validate_value({"count": 5, "flag": True, "missing": None}, "request body")

    def test_clean_values_pass(self):
        self.validator.validate_value(
            {"name": "First Example", "description": "A sample description"}, "request body"
        )

    def test_too_long_input(self):
        with pytest.raises(MalformedRequestError) as exc_info:
            self.validator.validate_string("a" * 51, "query parameters.q")
        assert exc_info.value.message == "Input too long in query parameters.q"
        assert exc_info.value.security_code == "SEC_007_MALFORMED_REQUEST"

    def test_empty_string_rejected_as_path(self):
        with pytest.raises(PathTraversalError):
            self.validator.validate_value({"description": ""}, "request body")


class TestUrlValidation:
    def setup_method(self):
        self.validator = RequestValidator(build_settings())

    @pytest.mark.parametrize(
        "url",
        [
            "/examples/../etc/passwd",
            "/examples/%2e%2e/secret",
            "/examples/%252e%252e/secret",
            "/examples/%252e%252e%252fetc%252fpasswd",
            "/examples/%252E%252E%252Fsecret",
            "/examples/%252e%252e%255csecret",
            "/examples/..%2fsecret",
        ],
    )
    def test_traversal_urls(self, url):
        with pytest.raises(PathTraversalError) as exc_info:
            self.validator.validate_url(url)
        assert exc_info.value.message == "Suspicious URL pattern detected in URL path"

    def test_encoded_null_byte(self):
        with pytest.raises(MalformedRequestError):
            self.validator.validate_url("/examples?q=%00")

    def test_url_too_long(self):
        with pytest.raises(MalformedRequestError) as exc_info:
            self.validator.validate_url("/examples/" + "a" * 200)
        assert exc_info.value.message == "URL too long"

    def test_regular_url_passes(self):
        self.validator.validate_url("/examples?page=2&limit=10")
        self.validator.validate_url("/examples/by-name/First%20Example")
