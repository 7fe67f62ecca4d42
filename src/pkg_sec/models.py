"""Data models for the package security verifier."""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class FindingSeverity(str, Enum):
    """Finding severity levels."""
    CRITICAL = "critical"
    HIGH = "high"
    WARNING = "warning"
    INFO = "info"


class FindingCategory(str, Enum):
    """Categories of verification findings."""
    CONFIGURATION = "configuration"
    INTEGRITY = "integrity"
    VULNERABILITY = "vulnerability"
    SIGNATURE = "signature"
    TRUST_POLICY = "trust_policy"
    SCHEMA_VALIDATION = "schema_validation"
    MISSING_INPUT = "missing_input"
    TOOLING = "tooling"
    INTERNAL_ERROR = "internal_error"
    INFORMATION = "information"


class Finding(BaseModel):
    """Single diagnostic produced by a check."""
    severity: FindingSeverity
    category: FindingCategory
    title: str
    description: str = ""
    recommendation: Optional[str] = None
    file_path: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ScanResult(BaseModel):
    """Result from a single check.

    A passing result that carries warning findings is a pass-with-warning.
    """
    scanner_name: str
    passed: bool
    findings: List[Finding] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def critical_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == FindingSeverity.CRITICAL)

    @property
    def high_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == FindingSeverity.HIGH)

    @property
    def warning_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == FindingSeverity.WARNING)

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0


class VerificationResult(BaseModel):
    """Outcome of a full verification run, keyed by check name."""
    results: Dict[str, ScanResult] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results.values())

    @property
    def failed_checks(self) -> List[str]:
        return [name for name, r in self.results.items() if not r.passed]


class AuditSummary(BaseModel):
    """Vulnerability counts by severity from one audit run."""
    critical: int = 0
    high: int = 0
    moderate: int = 0
    low: int = 0
    info: int = 0

    @property
    def total(self) -> int:
        return self.critical + self.high + self.moderate + self.low + self.info

    @property
    def has_blocking(self) -> bool:
        return self.critical > 0 or self.high > 0


class LockEntry(BaseModel):
    """One installed package as recorded in package-lock.json."""
    path: str
    integrity: Optional[str] = None
    version: Optional[str] = None
    resolved: Optional[str] = None

    @property
    def name(self) -> str:
        """Package name with a single leading node_modules/ removed."""
        prefix = "node_modules/"
        if self.path.startswith(prefix):
            return self.path[len(prefix):]
        return self.path

    @property
    def has_integrity(self) -> bool:
        return bool(self.integrity)

    @property
    def algorithm(self) -> Optional[str]:
        if not self.integrity:
            return None
        return self.integrity.split("-", 1)[0]


class TrustEntry(BaseModel):
    """Allow-listed package permitted to run install scripts."""
    name: Optional[str] = None
    reason: Optional[str] = None
    last_reviewed: Optional[str] = Field(default=None, alias="lastReviewed")
    # Entry as written in the policy file, for diagnostics
    raw: Optional[str] = Field(default=None, exclude=True)

    class Config:
        populate_by_name = True

    @property
    def is_complete(self) -> bool:
        return bool(self.name) and bool(self.reason)


class TrustPolicy(BaseModel):
    """The trusted-packages.json document."""
    last_reviewed: Optional[str] = Field(default=None, alias="lastReviewed")
    review_cadence: Optional[str] = Field(default=None, alias="reviewCadence")
    packages: List[TrustEntry] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @property
    def complete_entries(self) -> List[TrustEntry]:
        return [p for p in self.packages if p.is_complete]


class RebuildResult(BaseModel):
    """Outcome of a single `npm rebuild <name>` invocation."""
    package: str
    success: bool
    returncode: Optional[int] = None
    timed_out: bool = False
    error: Optional[str] = None
