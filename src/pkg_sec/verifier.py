"""Runs every verification check and aggregates the verdict."""

import logging
import traceback
from datetime import date, datetime
from pathlib import Path
from typing import Callable, List, Optional

from pkg_sec.config import ScannerConfig, config as default_config
from pkg_sec.models import (
    ScanResult, VerificationResult, Finding, FindingSeverity, FindingCategory
)
from pkg_sec.npm import NpmClient
from pkg_sec.scanners import (
    NpmrcScanner, IntegrityScanner, AuditScanner, SignatureScanner, TrustPolicyScanner
)

logger = logging.getLogger(__name__)


class PackageVerifier:
    """
    Runs the npmrc, integrity, audit, signatures and trusted checks.

    Checks are independent: an exception inside one becomes a failing
    result for that check and the remaining checks still run.
    """

    def __init__(
        self,
        base_dir: Path,
        npm: NpmClient,
        config: Optional[ScannerConfig] = None,
        today: Optional[date] = None
    ):
        self.base_dir = Path(base_dir)
        self.npm = npm
        self.config = config or default_config
        self.scanners = [
            NpmrcScanner(self.config),
            IntegrityScanner(self.config),
            AuditScanner(npm, self.config),
            SignatureScanner(npm, self.config),
            TrustPolicyScanner(self.config, today=today),
        ]

    @property
    def check_names(self) -> List[str]:
        return [s.scanner_name for s in self.scanners]

    def verify(
        self,
        on_start: Optional[Callable[[str], None]] = None,
        on_result: Optional[Callable[[ScanResult], None]] = None
    ) -> VerificationResult:
        """Run all checks in order and return the aggregate result."""
        start_time = datetime.now()
        result = VerificationResult(metadata={
            "base_dir": str(self.base_dir),
            "started_at": start_time.isoformat(),
        })

        for scanner in self.scanners:
            if on_start:
                on_start(scanner.scanner_name)

            scan_result = self._run_isolated(scanner)
            result.results[scanner.scanner_name] = scan_result
            logger.debug(f"{scanner.scanner_name}: {'passed' if scan_result.passed else 'failed'}")

            if on_result:
                on_result(scan_result)

        result.metadata["duration_seconds"] = (datetime.now() - start_time).total_seconds()
        result.metadata["passed"] = result.passed
        return result

    def _run_isolated(self, scanner) -> ScanResult:
        try:
            return scanner.scan(self.base_dir)
        except Exception as e:
            logger.debug(traceback.format_exc())
            return ScanResult(
                scanner_name=scanner.scanner_name,
                passed=False,
                findings=[Finding(
                    severity=FindingSeverity.CRITICAL,
                    category=FindingCategory.INTERNAL_ERROR,
                    title=f"{scanner.scanner_name} check crashed",
                    description=f"{type(e).__name__}: {e}"
                )]
            )
