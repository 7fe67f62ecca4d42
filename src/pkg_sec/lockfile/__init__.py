"""Lock file handling for package verification."""

from .manager import LockFileManager
from .verifier import CoverageStatus, IntegrityReport, verify_integrity

__all__ = [
    "LockFileManager",
    "CoverageStatus",
    "IntegrityReport",
    "verify_integrity"
]
