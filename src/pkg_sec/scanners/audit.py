"""Scanner wrapping npm audit."""

import logging
from pathlib import Path
from typing import List, Optional

from pkg_sec.config import ScannerConfig, config as default_config
from pkg_sec.exceptions import NpmCommandError
from pkg_sec.models import ScanResult, Finding, FindingSeverity, FindingCategory
from pkg_sec.npm import NpmClient, AuditParseError, parse_audit_output

logger = logging.getLogger(__name__)


class AuditScanner:
    """
    Runs ``npm audit --json`` and grades the severity breakdown.

    npm audit exits non-zero whenever it finds vulnerabilities, so the exit
    code is ignored as long as the JSON is usable. Only unusable output
    triggers the fallback to ``npm audit --audit-level=high``.
    """

    scanner_name = "audit"

    def __init__(self, npm: NpmClient, config: Optional[ScannerConfig] = None):
        self.npm = npm
        self.config = config or default_config

    def scan(self, base_dir: Path) -> ScanResult:
        findings: List[Finding] = []
        metadata = {"mode": "json"}

        try:
            output = self.npm.audit_json().stdout
        except NpmCommandError as e:
            logger.debug(f"npm audit --json could not run: {e}")
            output = ""

        try:
            summary = parse_audit_output(output)
        except AuditParseError as e:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.TOOLING,
                title="Could not parse audit JSON; running standard mode",
                description=str(e)
            ))
            return self._fallback(findings, metadata)

        metadata["vulnerabilities"] = summary.dict()

        for label, count, severity in (
            ("Critical", summary.critical, FindingSeverity.CRITICAL),
            ("High", summary.high, FindingSeverity.HIGH),
            ("Moderate", summary.moderate, FindingSeverity.WARNING),
            ("Low", summary.low, FindingSeverity.INFO),
            ("Info", summary.info, FindingSeverity.INFO),
        ):
            findings.append(Finding(
                severity=severity if count > 0 else FindingSeverity.INFO,
                category=FindingCategory.VULNERABILITY,
                title=f"{label}: {count}"
            ))

        if summary.has_blocking:
            findings.append(Finding(
                severity=FindingSeverity.HIGH,
                category=FindingCategory.VULNERABILITY,
                title="Critical/high vulnerabilities found",
                recommendation="Run 'npm audit fix'"
            ))
            passed = False
        elif summary.moderate > 0:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.VULNERABILITY,
                title="Moderate vulnerabilities found",
                recommendation="Review with 'npm audit'"
            ))
            passed = True
        else:
            findings.append(Finding(
                severity=FindingSeverity.INFO,
                category=FindingCategory.VULNERABILITY,
                title="No significant vulnerabilities found"
            ))
            passed = True

        return ScanResult(
            scanner_name=self.scanner_name,
            passed=passed,
            findings=findings,
            metadata=metadata
        )

    def _fallback(self, findings: List[Finding], metadata: dict) -> ScanResult:
        level = self.config.audit_fallback_level
        metadata["mode"] = f"audit-level={level}"

        try:
            outcome = self.npm.audit_with_level(level)
        except NpmCommandError as e:
            findings.append(Finding(
                severity=FindingSeverity.HIGH,
                category=FindingCategory.TOOLING,
                title="Audit failed",
                description=str(e)
            ))
            return ScanResult(
                scanner_name=self.scanner_name,
                passed=False,
                findings=findings,
                metadata=metadata
            )

        metadata["returncode"] = outcome.returncode
        if outcome.ok:
            findings.append(Finding(
                severity=FindingSeverity.INFO,
                category=FindingCategory.VULNERABILITY,
                title="Audit passed"
            ))
        else:
            findings.append(Finding(
                severity=FindingSeverity.HIGH,
                category=FindingCategory.VULNERABILITY,
                title="Audit failed",
                description=f"npm audit --audit-level={level} exited with code {outcome.returncode}"
            ))

        return ScanResult(
            scanner_name=self.scanner_name,
            passed=outcome.ok,
            findings=findings,
            metadata=metadata
        )
