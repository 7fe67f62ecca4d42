"""Narrow interface over the npm command line."""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from pkg_sec.exceptions import NpmCommandError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of a finished npm invocation."""
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class NpmClient(ABC):
    """Operations pkg-sec needs from npm.

    Implementations must not raise for a non-zero exit code; that is
    reported through ``CommandResult.returncode``. ``NpmCommandError`` is
    reserved for an executable that cannot be launched at all.
    """

    @abstractmethod
    def audit_json(self) -> CommandResult:
        """Run ``npm audit --json`` and capture its output."""

    @abstractmethod
    def audit_with_level(self, level: str) -> CommandResult:
        """Run ``npm audit --audit-level=<level>`` with inherited stdio."""

    @abstractmethod
    def version(self) -> CommandResult:
        """Run ``npm --version``."""

    @abstractmethod
    def audit_signatures(self, timeout: Optional[float] = None) -> CommandResult:
        """Run ``npm audit signatures``."""

    @abstractmethod
    def rebuild(self, package: str, timeout: Optional[float] = None) -> CommandResult:
        """Run ``npm rebuild <package>`` with inherited stdio."""


class NpmCli(NpmClient):
    """NpmClient backed by the real npm executable."""

    def __init__(self, npm_bin: str = "npm", cwd: Optional[str] = None):
        self.npm_bin = npm_bin
        self.cwd = cwd

    def _run(
        self,
        *args: str,
        capture: bool = True,
        timeout: Optional[float] = None
    ) -> CommandResult:
        cmd = [self.npm_bin, *args]
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            proc = subprocess.run(
                cmd,
                cwd=self.cwd,
                capture_output=capture,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            logger.debug(f"Timed out after {timeout}s: {' '.join(cmd)}")
            return CommandResult(
                args=cmd,
                returncode=-1,
                stdout=_decode(e.stdout),
                stderr=_decode(e.stderr),
                timed_out=True,
            )
        except OSError as e:
            raise NpmCommandError(f"Could not run {self.npm_bin}: {e}") from e

        logger.debug(f"Exit code {proc.returncode}: {' '.join(cmd)}")
        return CommandResult(
            args=cmd,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )

    def audit_json(self) -> CommandResult:
        return self._run("audit", "--json")

    def audit_with_level(self, level: str) -> CommandResult:
        return self._run("audit", f"--audit-level={level}", capture=False)

    def version(self) -> CommandResult:
        return self._run("--version")

    def audit_signatures(self, timeout: Optional[float] = None) -> CommandResult:
        return self._run("audit", "signatures", timeout=timeout)

    def rebuild(self, package: str, timeout: Optional[float] = None) -> CommandResult:
        return self._run("rebuild", package, capture=False, timeout=timeout)


def _decode(output) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output
