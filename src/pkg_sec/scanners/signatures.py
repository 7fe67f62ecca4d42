"""Scanner for npm registry signature verification support."""

from pathlib import Path
from typing import List, Optional

from pkg_sec.config import ScannerConfig, config as default_config
from pkg_sec.exceptions import NpmCommandError
from pkg_sec.models import ScanResult, Finding, FindingSeverity, FindingCategory
from pkg_sec.npm import NpmClient, parse_npm_version


class SignatureScanner:
    """Advisory check; never fails the verification run."""

    scanner_name = "signatures"

    def __init__(self, npm: NpmClient, config: Optional[ScannerConfig] = None):
        self.npm = npm
        self.config = config or default_config

    def scan(self, base_dir: Path) -> ScanResult:
        findings: List[Finding] = []
        metadata = {}

        try:
            outcome = self.npm.version()
        except NpmCommandError as e:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.TOOLING,
                title="Could not check npm version",
                description=str(e)
            ))
            return self._result(findings, metadata)

        version = parse_npm_version(outcome.stdout) if outcome.ok else None
        if version is None:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.TOOLING,
                title="Could not check npm version",
                description=outcome.stderr.strip() or f"Unexpected output: {outcome.stdout.strip()!r}"
            ))
            return self._result(findings, metadata)

        raw_version = outcome.stdout.strip()
        metadata["npm_version"] = raw_version
        findings.append(Finding(
            severity=FindingSeverity.INFO,
            category=FindingCategory.SIGNATURE,
            title=f"npm version: {raw_version}"
        ))

        minimum = tuple(self.config.min_signature_npm_version)
        if version < minimum:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.SIGNATURE,
                title=f"npm {raw_version} has limited signature support",
                recommendation=f"Upgrade to npm {'.'.join(str(p) for p in minimum)} or newer"
            ))
            metadata["supported"] = False
            return self._result(findings, metadata)

        metadata["supported"] = True
        findings.append(Finding(
            severity=FindingSeverity.INFO,
            category=FindingCategory.SIGNATURE,
            title="npm version supports signature verification"
        ))

        try:
            check = self.npm.audit_signatures(timeout=self.config.signature_timeout_seconds)
            verified = check.ok
        except NpmCommandError:
            verified = False

        metadata["signatures_verified"] = verified
        if verified:
            findings.append(Finding(
                severity=FindingSeverity.INFO,
                category=FindingCategory.SIGNATURE,
                title="Signature verification available"
            ))
        else:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.SIGNATURE,
                title="Signature check skipped (registry support may be required)"
            ))

        return self._result(findings, metadata)

    def _result(self, findings: List[Finding], metadata: dict) -> ScanResult:
        return ScanResult(
            scanner_name=self.scanner_name,
            passed=True,
            findings=findings,
            metadata=metadata
        )
