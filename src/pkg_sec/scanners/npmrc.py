"""Scanner for .npmrc security settings."""

from pathlib import Path
from typing import List, Optional

from pkg_sec.config import ScannerConfig, config as default_config
from pkg_sec.models import ScanResult, Finding, FindingSeverity, FindingCategory
from pkg_sec.npmrc import parse_npmrc, evaluate_settings


class NpmrcScanner:
    """Checks that .npmrc enables the required hardening settings."""

    scanner_name = "npmrc"

    def __init__(self, config: Optional[ScannerConfig] = None):
        self.config = config or default_config

    def scan(self, base_dir: Path) -> ScanResult:
        """Scan ``base_dir/.npmrc`` for required and recommended settings."""
        findings: List[Finding] = []
        npmrc_path = Path(base_dir) / self.config.npmrc_name
        metadata = {"npmrc_path": str(npmrc_path)}

        if not npmrc_path.exists():
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.MISSING_INPUT,
                title=f"{self.config.npmrc_name} not found",
                description="No npm security configuration present",
                recommendation="Add an .npmrc with ignore-scripts=true, audit-level, "
                               "package-lock=true and strict-ssl=true",
                file_path=str(npmrc_path)
            ))
            return ScanResult(
                scanner_name=self.scanner_name,
                passed=True,
                findings=findings,
                metadata=metadata
            )

        settings = parse_npmrc(npmrc_path.read_text(encoding="utf-8", errors="replace"))
        required = evaluate_settings(settings, self.config.required_settings)
        recommended = evaluate_settings(settings, self.config.recommended_settings)

        for setting in required.satisfied:
            findings.append(Finding(
                severity=FindingSeverity.INFO,
                category=FindingCategory.CONFIGURATION,
                title=f"Required: {setting.key}",
                file_path=str(npmrc_path)
            ))
        for setting in required.missing:
            findings.append(Finding(
                severity=FindingSeverity.HIGH,
                category=FindingCategory.CONFIGURATION,
                title=f"Missing required: {setting}",
                description=f"'{setting.key}' is not set",
                recommendation=f"Add '{setting}' to {self.config.npmrc_name}",
                file_path=str(npmrc_path)
            ))
        for setting, actual in required.mismatched:
            findings.append(Finding(
                severity=FindingSeverity.HIGH,
                category=FindingCategory.CONFIGURATION,
                title=f"Required setting has wrong value: {setting.key}",
                description=f"Expected '{setting}', found '{setting.key}={actual}'",
                recommendation=f"Set '{setting}' in {self.config.npmrc_name}",
                file_path=str(npmrc_path)
            ))

        for setting in recommended.satisfied:
            findings.append(Finding(
                severity=FindingSeverity.INFO,
                category=FindingCategory.CONFIGURATION,
                title=f"Recommended: {setting.key}",
                file_path=str(npmrc_path)
            ))
        for setting in recommended.missing:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.CONFIGURATION,
                title=f"Consider adding: {setting}",
                file_path=str(npmrc_path)
            ))
        for setting, actual in recommended.mismatched:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.CONFIGURATION,
                title=f"Consider changing: {setting.key}={actual} to {setting}",
                file_path=str(npmrc_path)
            ))

        metadata["configured"] = sorted(settings)
        metadata["missing_required"] = [str(s) for s in required.missing]
        metadata["missing_recommended"] = [str(s) for s in recommended.missing]

        return ScanResult(
            scanner_name=self.scanner_name,
            passed=required.ok,
            findings=findings,
            metadata=metadata
        )
