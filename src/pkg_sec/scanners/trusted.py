"""Scanner validating the trusted-packages.json allow-list."""

from datetime import date
from pathlib import Path
from typing import List, Optional

from pkg_sec.config import ScannerConfig, config as default_config
from pkg_sec.exceptions import TrustPolicyError
from pkg_sec.models import ScanResult, Finding, FindingSeverity, FindingCategory
from pkg_sec.trust import load_trust_policy, review_age_days


class TrustPolicyScanner:
    """
    Validates the trust policy document.

    Only an unreadable or structurally invalid document fails this check.
    Incomplete entries, an empty list and an overdue review are warnings.
    """

    scanner_name = "trusted"

    def __init__(self, config: Optional[ScannerConfig] = None, today: Optional[date] = None):
        self.config = config or default_config
        self.today = today

    def scan(self, base_dir: Path) -> ScanResult:
        findings: List[Finding] = []
        policy_path = Path(base_dir) / self.config.trust_policy_name
        metadata = {"policy_path": str(policy_path)}

        if not policy_path.exists():
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.MISSING_INPUT,
                title=f"{self.config.trust_policy_name} not found",
                description="No selective script execution configured",
                file_path=str(policy_path)
            ))
            return self._result(True, findings, metadata)

        try:
            policy = load_trust_policy(policy_path)
        except TrustPolicyError as e:
            findings.append(Finding(
                severity=FindingSeverity.HIGH,
                category=FindingCategory.SCHEMA_VALIDATION,
                title=f"Invalid {self.config.trust_policy_name}",
                description=str(e),
                file_path=str(policy_path)
            ))
            return self._result(False, findings, metadata)

        metadata["packages"] = len(policy.packages)
        metadata["review_cadence"] = policy.review_cadence

        if not policy.packages:
            findings.append(Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.TRUST_POLICY,
                title="Trusted packages list is empty"
            ))
            return self._result(True, findings, metadata)

        findings.append(Finding(
            severity=FindingSeverity.INFO,
            category=FindingCategory.TRUST_POLICY,
            title=f"{len(policy.packages)} trusted package(s) configured"
        ))

        incomplete = 0
        for entry in policy.packages:
            if entry.is_complete:
                findings.append(Finding(
                    severity=FindingSeverity.INFO,
                    category=FindingCategory.TRUST_POLICY,
                    title=f"{entry.name} - {entry.reason}"
                ))
            else:
                incomplete += 1
                findings.append(Finding(
                    severity=FindingSeverity.WARNING,
                    category=FindingCategory.TRUST_POLICY,
                    title="Incomplete entry",
                    description=entry.raw or entry.json(by_alias=True, exclude_none=True),
                    recommendation="Every trusted package needs a name and a reason"
                ))
        metadata["incomplete_entries"] = incomplete

        findings.extend(self._check_review_age(policy, metadata))

        return self._result(True, findings, metadata)

    def _check_review_age(self, policy, metadata: dict) -> List[Finding]:
        max_age = self.config.review_max_age_days

        try:
            age = review_age_days(policy, self.today)
        except ValueError:
            return [Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.TRUST_POLICY,
                title=f"Unrecognised lastReviewed date: {policy.last_reviewed}",
                recommendation="Use an ISO date such as 2025-01-31"
            )]

        if age is None:
            return [Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.TRUST_POLICY,
                title="No lastReviewed date recorded",
                recommendation="Record when the allow-list was last reviewed"
            )]

        metadata["days_since_review"] = age
        if age > max_age:
            return [Finding(
                severity=FindingSeverity.WARNING,
                category=FindingCategory.TRUST_POLICY,
                title=f"Last reviewed {age} days ago - due for quarterly review",
                recommendation=f"Review trusted packages at least every {max_age} days"
            )]

        return [Finding(
            severity=FindingSeverity.INFO,
            category=FindingCategory.TRUST_POLICY,
            title=f"Last reviewed {age} day(s) ago"
        )]

    def _result(self, passed: bool, findings: List[Finding], metadata: dict) -> ScanResult:
        return ScanResult(
            scanner_name=self.scanner_name,
            passed=passed,
            findings=findings,
            metadata=metadata
        )
