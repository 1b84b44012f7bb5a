"""
API Base — Security Service Tests
==================================

What we test:
    ✅ sanitize_input strips shell metacharacters and collapses whitespace
    ✅ sanitize_input caps the output at 1000 characters
    ✅ contains_os_commands matches commands only as standalone words
    ✅ generate_secure_hash returns a SHA-256 hex digest
    ✅ is_valid_path rejects traversal fragments (and empty input)
"""

import pytest

from api_base.security.service import SANITIZED_MAX_LENGTH, SecurityService


class TestSanitizeInput:
    def setup_method(self):
        self.service = SecurityService()

    def test_removes_dangerous_characters(self):
        assert self.service.sanitize_input("<b>hello</b>; rm") == "bhello/b rm"

    def test_collapses_and_trims_whitespace(self):
        assert self.service.sanitize_input("  a   b\n\t c  ") == "a b c"

    def test_truncates_long_input(self):
        result = self.service.sanitize_input("x" * 5000)
        assert len(result) == SANITIZED_MAX_LENGTH

    @pytest.mark.parametrize("value", [None, "", 42, ["a"]])
    def test_non_string_or_empty_yields_empty_string(self, value):
        assert self.service.sanitize_input(value) == ""


class TestContainsOsCommands:
    def setup_method(self):
        self.service = SecurityService()

    @pytest.mark.parametrize(
        "value",
        [
            "rm -rf /",
            "please run ls now",
            "ls",
            "foo;cat /etc/hosts",
            "RM -RF /tmp",
            "then whoami",
        ],
    )
    def test_detects_standalone_commands(self, value):
        assert self.service.contains_os_commands(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            "list files",
            "Format the report",
            "First Example",
            "A sample description",
        ],
    )
    def test_ignores_commands_inside_words(self, value):
        assert self.service.contains_os_commands(value) is False

    @pytest.mark.parametrize("value", [None, "", 7])
    def test_non_string_is_never_a_command(self, value):
        assert self.service.contains_os_commands(value) is False


class TestGenerateSecureHash:
    def test_sha256_hex_digest(self):
        service = SecurityService()
        assert service.generate_secure_hash("abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_same_input_same_hash(self):
        service = SecurityService()
        assert service.generate_secure_hash("value") == service.generate_secure_hash("value")


class TestIsValidPath:
    def setup_method(self):
        self.service = SecurityService()

    def test_plain_relative_path_is_valid(self):
        assert self.service.is_valid_path("docs/readme.txt") is True

    @pytest.mark.parametrize(
        "value",
        ["../etc/passwd", "..\\windows\\system32", "%2E%2E%2Fetc", "files/..%2fsecret"],
    )
    def test_traversal_fragments_are_invalid(self, value):
        assert self.service.is_valid_path(value) is False

    def test_empty_string_is_invalid(self):
        # Consequence: an empty string anywhere in a scanned body is rejected
        assert self.service.is_valid_path("") is False
