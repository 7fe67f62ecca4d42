"""Unit tests for the signature support check."""

import pytest

from conftest import FakeNpm
from pkg_sec.exceptions import NpmCommandError
from pkg_sec.npm import parse_npm_version
from pkg_sec.scanners import SignatureScanner


@pytest.mark.parametrize("output,expected", [
    ("10.2.4\n", (10, 2)),
    ("8.15.0", (8, 15)),
    ("v9.1.0", (9, 1)),
    ("not a version", None),
    ("", None),
])
def test_parse_npm_version(output, expected):
    assert parse_npm_version(output) == expected


class TestSignatureScanner:
    """Test signature support grading."""

    def test_modern_npm_verifies_signatures(self):
        npm = FakeNpm(version="10.2.4")
        result = SignatureScanner(npm).scan(".")

        assert result.passed
        assert not result.has_warnings
        assert result.metadata["supported"] is True
        assert result.metadata["signatures_verified"] is True
        assert ("audit", "signatures") in npm.calls

    def test_minimum_version_is_supported(self):
        result = SignatureScanner(FakeNpm(version="8.15.0")).scan(".")
        assert result.metadata["supported"] is True

    def test_old_npm_warns_only(self):
        npm = FakeNpm(version="8.14.9")
        result = SignatureScanner(npm).scan(".")

        assert result.passed
        assert result.has_warnings
        assert result.metadata["supported"] is False
        assert ("audit", "signatures") not in npm.calls

    def test_signature_failure_warns_only(self):
        result = SignatureScanner(FakeNpm(signatures_returncode=1)).scan(".")

        assert result.passed
        assert result.has_warnings
        assert result.metadata["signatures_verified"] is False

    def test_unreadable_version_warns_only(self):
        result = SignatureScanner(FakeNpm(version="garbage")).scan(".")

        assert result.passed
        assert result.has_warnings

    def test_npm_missing_warns_only(self):
        class MissingNpm(FakeNpm):
            def version(self):
                raise NpmCommandError("Could not run npm")

        result = SignatureScanner(MissingNpm()).scan(".")

        assert result.passed
        assert result.has_warnings
