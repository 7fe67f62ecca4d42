"""Pytest configuration and shared fixtures."""

import json
import sys
import pytest
from pathlib import Path

# Add the src directory to Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from pkg_sec.npm import NpmClient, CommandResult  # noqa: E402


class FakeNpm(NpmClient):
    """Scriptable NpmClient that records every call."""

    def __init__(
        self,
        audit_output="",
        audit_level_returncode=0,
        version="10.2.4",
        signatures_returncode=0,
        rebuild_returncodes=None,
        rebuild_timeouts=()
    ):
        self.audit_output = audit_output
        self.audit_level_returncode = audit_level_returncode
        self.version_output = version
        self.signatures_returncode = signatures_returncode
        self.rebuild_returncodes = rebuild_returncodes or {}
        self.rebuild_timeouts = set(rebuild_timeouts)
        self.calls = []

    @property
    def rebuilt(self):
        return [args[1] for args in self.calls if args[0] == "rebuild"]

    def audit_json(self):
        self.calls.append(("audit", "--json"))
        # npm audit exits 1 whenever it reports vulnerabilities
        return CommandResult(args=["npm", "audit", "--json"], returncode=1, stdout=self.audit_output)

    def audit_with_level(self, level):
        self.calls.append(("audit", f"--audit-level={level}"))
        return CommandResult(args=["npm", "audit"], returncode=self.audit_level_returncode)

    def version(self):
        self.calls.append(("--version",))
        return CommandResult(args=["npm", "--version"], returncode=0, stdout=self.version_output + "\n")

    def audit_signatures(self, timeout=None):
        self.calls.append(("audit", "signatures"))
        return CommandResult(args=["npm", "audit", "signatures"], returncode=self.signatures_returncode)

    def rebuild(self, package, timeout=None):
        self.calls.append(("rebuild", package, timeout))
        if package in self.rebuild_timeouts:
            return CommandResult(args=["npm", "rebuild", package], returncode=-1, timed_out=True)
        return CommandResult(
            args=["npm", "rebuild", package],
            returncode=self.rebuild_returncodes.get(package, 0)
        )


def audit_json(critical=0, high=0, moderate=0, low=0, info=0):
    """Build npm audit --json output with the given severity counts."""
    return json.dumps({
        "auditReportVersion": 2,
        "vulnerabilities": {},
        "metadata": {
            "vulnerabilities": {
                "info": info,
                "low": low,
                "moderate": moderate,
                "high": high,
                "critical": critical,
                "total": info + low + moderate + high + critical
            },
            "dependencies": {"prod": 10, "dev": 5, "total": 15}
        }
    })


def write_lockfile(directory, packages, name="test-project"):
    """Write a package-lock.json whose packages map to the given entries.

    ``packages`` maps lockfile keys to an integrity string or None.
    """
    lock_packages = {"": {"name": name, "version": "1.0.0"}}
    for path, integrity in packages.items():
        entry = {"version": "1.0.0", "resolved": f"https://registry.npmjs.org/{path}.tgz"}
        if integrity is not None:
            entry["integrity"] = integrity
        lock_packages[path] = entry

    lockfile = Path(directory) / "package-lock.json"
    lockfile.write_text(json.dumps({
        "name": name,
        "version": "1.0.0",
        "lockfileVersion": 3,
        "requires": True,
        "packages": lock_packages
    }, indent=2))
    return lockfile


def write_trust_policy(directory, packages, last_reviewed="2025-01-15", cadence="quarterly"):
    """Write a trusted-packages.json document."""
    data = {"reviewCadence": cadence, "packages": packages}
    if last_reviewed is not None:
        data["lastReviewed"] = last_reviewed
    policy = Path(directory) / "trusted-packages.json"
    policy.write_text(json.dumps(data, indent=2))
    return policy


SECURE_NPMRC = """\
# Security hardening
ignore-scripts=true
audit-level=high
package-lock=true
strict-ssl=true
save-exact=true
engine-strict=true
prefer-offline=true
optional=false
"""


@pytest.fixture
def fake_npm():
    """A FakeNpm reporting a clean audit and a modern npm."""
    return FakeNpm(audit_output=audit_json())


@pytest.fixture
def secure_project(tmp_path):
    """A project directory where every check passes cleanly."""
    write_lockfile(tmp_path, {
        "node_modules/esbuild": "sha512-aaa",
        "node_modules/@esbuild/linux-x64": "sha512-bbb",
        "node_modules/lodash": "sha512-ccc",
    })
    write_trust_policy(tmp_path, [
        {"name": "esbuild", "reason": "Downloads platform binary", "lastReviewed": "2025-01-15"}
    ])
    (tmp_path / ".npmrc").write_text(SECURE_NPMRC)
    return tmp_path


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch):
    """Reset environment variables for each test."""
    for name in ("NPM_BIN", "REBUILD_TIMEOUT", "REVIEW_MAX_AGE_DAYS", "COVERAGE_THRESHOLD"):
        monkeypatch.delenv(f"PKG_SEC_{name}", raising=False)
