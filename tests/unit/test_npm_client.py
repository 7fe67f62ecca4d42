"""Tests for the npm subprocess client."""

import subprocess
import pytest

from pkg_sec.exceptions import NpmCommandError
from pkg_sec.npm import NpmCli


class FakeCompleted:
    def __init__(self, returncode=0, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


@pytest.fixture
def recorded(monkeypatch):
    """Replace subprocess.run and record its calls."""
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        return FakeCompleted(returncode=0, stdout="10.2.4\n")

    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


class TestNpmCli:
    """Test command construction and failure handling."""

    def test_arguments_are_passed_as_a_list(self, recorded):
        NpmCli("npm", cwd="/project").rebuild("@scope/pkg; rm -rf /", timeout=30)

        cmd, kwargs = recorded[0]
        assert cmd == ["npm", "rebuild", "@scope/pkg; rm -rf /"]
        assert kwargs["cwd"] == "/project"
        assert kwargs["timeout"] == 30
        assert kwargs["capture_output"] is False
        assert "shell" not in kwargs

    def test_audit_json_captures_output(self, recorded):
        result = NpmCli("/usr/bin/npm").audit_json()

        cmd, kwargs = recorded[0]
        assert cmd == ["/usr/bin/npm", "audit", "--json"]
        assert kwargs["capture_output"] is True
        assert result.ok
        assert result.stdout == "10.2.4\n"

    def test_audit_with_level(self, recorded):
        NpmCli().audit_with_level("high")
        assert recorded[0][0] == ["npm", "audit", "--audit-level=high"]

    def test_nonzero_exit_is_reported(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", lambda cmd, **kw: FakeCompleted(returncode=1))
        result = NpmCli().audit_signatures(timeout=30)

        assert result.returncode == 1
        assert not result.ok

    def test_timeout(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"], output=b"partial")

        monkeypatch.setattr(subprocess, "run", fake_run)
        result = NpmCli().rebuild("esbuild", timeout=1)

        assert result.timed_out
        assert not result.ok
        assert result.stdout == "partial"

    def test_missing_executable(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", cmd[0])

        monkeypatch.setattr(subprocess, "run", fake_run)
        with pytest.raises(NpmCommandError):
            NpmCli("not-npm").version()
