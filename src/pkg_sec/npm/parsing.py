"""Parsers for npm command output."""

import json
import re
from typing import Optional, Tuple

from pkg_sec.models import AuditSummary

SEVERITIES = ("critical", "high", "moderate", "low", "info")

_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)")


class AuditParseError(ValueError):
    """Raised when npm audit output lacks the vulnerability breakdown."""
    pass


def parse_audit_output(output: str) -> AuditSummary:
    """
    Extract severity counts from ``npm audit --json`` output.

    The expected shape is ``{"metadata": {"vulnerabilities": {...}}}``.
    Error payloads such as ``{"error": {"code": "ENOLOCK"}}`` are rejected.

    Raises:
        AuditParseError: If the output is empty, not JSON, or has no breakdown
    """
    if not output or not output.strip():
        raise AuditParseError("npm audit produced no output")

    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise AuditParseError(f"npm audit output is not JSON: {e}")

    if not isinstance(data, dict):
        raise AuditParseError("npm audit output is not a JSON object")

    if "error" in data:
        error = data["error"]
        summary = error.get("summary") if isinstance(error, dict) else error
        raise AuditParseError(f"npm audit reported an error: {summary}")

    metadata = data.get("metadata")
    vulns = metadata.get("vulnerabilities") if isinstance(metadata, dict) else None
    if not isinstance(vulns, dict):
        raise AuditParseError("npm audit output has no metadata.vulnerabilities")

    counts = {}
    for severity in SEVERITIES:
        try:
            counts[severity] = int(vulns.get(severity) or 0)
        except (TypeError, ValueError):
            raise AuditParseError(f"Invalid {severity} count: {vulns.get(severity)!r}")

    return AuditSummary(**counts)


def parse_npm_version(output: str) -> Optional[Tuple[int, int]]:
    """Return (major, minor) from ``npm --version`` output, or None."""
    match = _VERSION_RE.match(output.strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))
