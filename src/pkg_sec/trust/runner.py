"""Selective install-script execution for trusted packages."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from pkg_sec.config import ScannerConfig, config as default_config
from pkg_sec.exceptions import NpmCommandError
from pkg_sec.lockfile import LockFileManager
from pkg_sec.models import (
    Finding, FindingCategory, FindingSeverity, RebuildResult, TrustPolicy
)
from pkg_sec.npm import NpmClient
from pkg_sec.trust.matcher import select_trusted
from pkg_sec.trust.policy import load_trust_policy

logger = logging.getLogger(__name__)


@dataclass
class RunPlan:
    """Packages selected for rebuild and the inputs they came from."""
    policy: TrustPolicy
    installed: List[str] = field(default_factory=list)
    to_rebuild: List[str] = field(default_factory=list)
    findings: List[Finding] = field(default_factory=list)


@dataclass
class RunReport:
    """Outcome of executing a RunPlan."""
    plan: RunPlan
    results: List[RebuildResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def failed(self) -> Optional[RebuildResult]:
        return next((r for r in self.results if not r.success), None)

    @property
    def skipped(self) -> List[str]:
        """Planned packages never attempted because an earlier one failed."""
        attempted = len(self.results)
        return self.plan.to_rebuild[attempted:]


class TrustedScriptRunner:
    """
    Runs ``npm rebuild`` for installed packages on the trust list only.

    Rebuilds happen one at a time in lockfile order and stop at the first
    failure. A package that matches no trust entry is never rebuilt.
    """

    def __init__(
        self,
        base_dir: Path,
        npm: NpmClient,
        config: Optional[ScannerConfig] = None
    ):
        self.base_dir = Path(base_dir)
        self.npm = npm
        self.config = config or default_config

    def load_policy(self) -> TrustPolicy:
        """Load the trust policy; raises TrustPolicyError when absent or invalid."""
        return load_trust_policy(self.base_dir / self.config.trust_policy_name)

    def installed_packages(self, findings: Optional[List[Finding]] = None) -> List[str]:
        """
        Installed package names from the lock file.

        A missing lock file yields an empty list and a warning finding.
        """
        lockfile_path = self.base_dir / self.config.lockfile_name
        if not lockfile_path.exists():
            description = f"{self.config.lockfile_name} not found; no installed packages to match"
            if (self.base_dir / self.config.alt_lockfile_name).exists():
                description = (
                    f"Only {self.config.alt_lockfile_name} found. Trusted-script rebuild uses "
                    f"npm rebuild; ensure {self.config.lockfile_name} is present for full verification."
                )
            logger.debug(description)
            if findings is not None:
                findings.append(Finding(
                    severity=FindingSeverity.WARNING,
                    category=FindingCategory.MISSING_INPUT,
                    title="Lock file not found",
                    description=description,
                    file_path=str(lockfile_path)
                ))
            return []

        return LockFileManager(lockfile_path).installed_names()

    def plan(self) -> RunPlan:
        """Resolve which installed packages are allowed to run scripts."""
        policy = self.load_policy()
        findings: List[Finding] = []

        for entry in policy.packages:
            if not entry.name:
                findings.append(Finding(
                    severity=FindingSeverity.WARNING,
                    category=FindingCategory.TRUST_POLICY,
                    title="Trust entry without a name is ignored",
                    description=entry.raw or entry.json(by_alias=True, exclude_none=True)
                ))

        installed = self.installed_packages(findings)
        to_rebuild = select_trusted(installed, policy.packages)
        logger.debug(f"{len(to_rebuild)} of {len(installed)} installed packages are trusted")

        return RunPlan(
            policy=policy,
            installed=installed,
            to_rebuild=to_rebuild,
            findings=findings
        )

    def rebuild(self, package: str, timeout: Optional[float] = None) -> RebuildResult:
        """Rebuild a single package, converting every failure into a result."""
        timeout = timeout if timeout is not None else self.config.rebuild_timeout_seconds

        try:
            outcome = self.npm.rebuild(package, timeout=timeout)
        except NpmCommandError as e:
            return RebuildResult(package=package, success=False, error=str(e))

        if outcome.timed_out:
            return RebuildResult(
                package=package,
                success=False,
                returncode=outcome.returncode,
                timed_out=True,
                error=f"timed out after {timeout}s"
            )

        if outcome.returncode != 0:
            return RebuildResult(
                package=package,
                success=False,
                returncode=outcome.returncode,
                error=f"npm rebuild exited with code {outcome.returncode}"
            )

        return RebuildResult(package=package, success=True, returncode=0)

    def run(
        self,
        plan: Optional[RunPlan] = None,
        timeout: Optional[float] = None,
        on_start: Optional[Callable[[str], None]] = None,
        on_result: Optional[Callable[[RebuildResult], None]] = None
    ) -> RunReport:
        """
        Rebuild every planned package, stopping at the first failure.

        Args:
            plan: Precomputed plan; built from disk when omitted
            timeout: Per-package timeout in seconds
            on_start: Called with the package name before each rebuild
            on_result: Called with each RebuildResult

        Returns:
            RunReport with one result per attempted package
        """
        plan = plan or self.plan()
        report = RunReport(plan=plan)

        for package in plan.to_rebuild:
            if on_start:
                on_start(package)

            result = self.rebuild(package, timeout=timeout)
            report.results.append(result)

            if on_result:
                on_result(result)

            if not result.success:
                logger.debug(f"Stopping after failed rebuild of {package}: {result.error}")
                break

        return report
