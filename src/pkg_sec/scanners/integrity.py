"""Scanner for package-lock.json integrity hash coverage."""

from pathlib import Path
from typing import List, Optional

from pkg_sec.config import ScannerConfig, config as default_config
from pkg_sec.exceptions import LockFileError
from pkg_sec.lockfile import LockFileManager, CoverageStatus, verify_integrity
from pkg_sec.models import ScanResult, Finding, FindingSeverity, FindingCategory


class IntegrityScanner:
    """Grades how many lockfile entries carry an integrity digest."""

    scanner_name = "integrity"

    def __init__(self, config: Optional[ScannerConfig] = None):
        self.config = config or default_config

    def scan(self, base_dir: Path) -> ScanResult:
        findings: List[Finding] = []
        lockfile_path = Path(base_dir) / self.config.lockfile_name
        metadata = {"lockfile_path": str(lockfile_path)}

        if not lockfile_path.exists():
            findings.append(Finding(
                severity=FindingSeverity.CRITICAL,
                category=FindingCategory.MISSING_INPUT,
                title=f"{self.config.lockfile_name} not found",
                description="Integrity hashes cannot be verified without a lock file",
                recommendation="Run 'bun install' or 'npm install' to generate it",
                file_path=str(lockfile_path)
            ))
            return ScanResult(
                scanner_name=self.scanner_name,
                passed=False,
                findings=findings,
                metadata=metadata
            )

        try:
            manager = LockFileManager(lockfile_path)
        except LockFileError as e:
            findings.append(Finding(
                severity=FindingSeverity.CRITICAL,
                category=FindingCategory.SCHEMA_VALIDATION,
                title=f"Invalid {self.config.lockfile_name}",
                description=str(e),
                recommendation="Regenerate the lock file",
                file_path=str(lockfile_path)
            ))
            return ScanResult(
                scanner_name=self.scanner_name,
                passed=False,
                findings=findings,
                metadata=metadata
            )

        report = verify_integrity(
            manager,
            threshold=self.config.coverage_threshold,
            strong_prefix=self.config.strong_hash_prefix
        )
        metadata.update(report.to_dict())

        findings.append(Finding(
            severity=FindingSeverity.INFO,
            category=FindingCategory.INTEGRITY,
            title="Integrity hash counts",
            description=(
                f"Total packages: {report.total}, "
                f"with integrity hashes: {report.with_integrity}, "
                f"with SHA-512: {report.strong}"
            )
        ))

        if report.total == 0:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.INTEGRITY,
                title="Lock file lists no packages",
                file_path=str(lockfile_path)
            ))

        if report.missing:
            limit = self.config.missing_preview_limit
            preview = report.missing[:limit]
            description = "\n".join(f"- {path}" for path in preview)
            if len(report.missing) > limit:
                description += f"\n... and {len(report.missing) - limit} more"
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.INTEGRITY,
                title=f"Missing integrity: {len(report.missing)}",
                description=description,
                recommendation="Regenerate the lock file from the registry",
                file_path=str(lockfile_path),
                metadata={"packages": report.missing}
            ))

        if report.weak:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.INTEGRITY,
                title=f"Weaker than SHA-512: {len(report.weak)}",
                description=", ".join(report.weak[:self.config.missing_preview_limit]),
                file_path=str(lockfile_path),
                metadata={"packages": report.weak}
            ))

        if report.status == CoverageStatus.COMPLETE:
            findings.append(Finding(
                severity=FindingSeverity.INFO,
                category=FindingCategory.INTEGRITY,
                title=f"All packages have integrity hashes ({report.coverage:.1f}%)"
            ))
        elif report.status == CoverageStatus.ACCEPTABLE:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.INTEGRITY,
                title=f"{report.coverage:.1f}% of packages have integrity hashes"
            ))
        else:
            findings.append(Finding(
                severity=FindingSeverity.HIGH,
                category=FindingCategory.INTEGRITY,
                title=f"Only {report.coverage:.1f}% of packages have integrity hashes",
                description=f"At least {self.config.coverage_threshold:g}% coverage is required",
                recommendation="Regenerate the lock file so every package records a digest",
                file_path=str(lockfile_path)
            ))

        return ScanResult(
            scanner_name=self.scanner_name,
            passed=report.passed,
            findings=findings,
            metadata=metadata
        )
