"""Integrity hash coverage for lock files."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from pkg_sec.lockfile.manager import LockFileManager


class CoverageStatus(str, Enum):
    """Verdict of an integrity coverage evaluation."""
    COMPLETE = "complete"
    ACCEPTABLE = "acceptable"
    INSUFFICIENT = "insufficient"


@dataclass
class IntegrityReport:
    """Digest counts over the non-root entries of a lock file."""
    total: int = 0
    with_integrity: int = 0
    strong: int = 0
    missing: List[str] = field(default_factory=list)
    weak: List[str] = field(default_factory=list)
    status: CoverageStatus = CoverageStatus.COMPLETE

    @property
    def coverage(self) -> float:
        """Percentage of entries with a digest, rounded to one decimal."""
        if self.total == 0:
            return 100.0
        return round(self.with_integrity * 100.0 / self.total, 1)

    @property
    def passed(self) -> bool:
        return self.status != CoverageStatus.INSUFFICIENT

    def to_dict(self) -> Dict[str, object]:
        return {
            "total": self.total,
            "with_integrity": self.with_integrity,
            "sha512": self.strong,
            "coverage": self.coverage,
            "missing": list(self.missing),
            "status": self.status.value,
        }


def verify_integrity(
    manager: LockFileManager,
    threshold: float = 95.0,
    strong_prefix: str = "sha512-"
) -> IntegrityReport:
    """
    Count integrity digests in a lock file and grade the coverage.

    Coverage is compared without rounding: 100% is complete, anything at or
    above ``threshold`` is acceptable, anything below is insufficient.

    Args:
        manager: Loaded lock file
        threshold: Minimum acceptable coverage in percent
        strong_prefix: Digest prefix of the preferred hash algorithm

    Returns:
        IntegrityReport with counts and status
    """
    report = IntegrityReport()

    for entry in manager.list_entries():
        report.total += 1
        if not entry.has_integrity:
            report.missing.append(entry.path)
            continue

        report.with_integrity += 1
        if entry.integrity.startswith(strong_prefix):
            report.strong += 1
        else:
            report.weak.append(entry.path)

    if report.with_integrity == report.total:
        report.status = CoverageStatus.COMPLETE
    elif report.with_integrity * 100 >= threshold * report.total:
        report.status = CoverageStatus.ACCEPTABLE
    else:
        report.status = CoverageStatus.INSUFFICIENT

    return report
