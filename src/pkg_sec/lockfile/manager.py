"""Reader for npm package-lock.json files."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pkg_sec.exceptions import LockFileError
from pkg_sec.models import LockEntry

logger = logging.getLogger(__name__)


class LockFileManager:
    """Read-only view of a package-lock.json ``packages`` mapping."""

    def __init__(self, lockfile_path: Path = None):
        """
        Initialize lock file manager.

        Args:
            lockfile_path: Path to lock file. Defaults to package-lock.json
        """
        self.lockfile_path = lockfile_path or Path("package-lock.json")
        self._entries: Dict[str, LockEntry] = {}
        self._metadata: Dict[str, Any] = {}

        if self.lockfile_path.exists():
            self.load()

    @property
    def exists(self) -> bool:
        return self.lockfile_path.exists()

    def load(self) -> None:
        """Load the lock file, skipping the root (empty-key) entry."""
        try:
            data = json.loads(self.lockfile_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise LockFileError(f"Failed to parse {self.lockfile_path.name}: {e}")

        if not isinstance(data, dict):
            raise LockFileError(f"{self.lockfile_path.name} is not a JSON object")

        self._metadata = {
            "name": data.get("name"),
            "version": data.get("version"),
            "lockfileVersion": data.get("lockfileVersion"),
        }

        packages = data.get("packages") or {}
        if not isinstance(packages, dict):
            raise LockFileError(f"'packages' in {self.lockfile_path.name} is not an object")

        self._entries = {}
        for path, info in packages.items():
            if path == "":
                continue
            info = info if isinstance(info, dict) else {}
            self._entries[path] = LockEntry(
                path=path,
                integrity=_as_str(info.get("integrity")),
                version=_as_str(info.get("version")),
                resolved=_as_str(info.get("resolved")),
            )

        logger.debug(f"Loaded {len(self._entries)} entries from {self.lockfile_path}")

    @property
    def metadata(self) -> Dict[str, Any]:
        return dict(self._metadata)

    def get_entry(self, path: str) -> Optional[LockEntry]:
        """Get a lock entry by its lockfile key."""
        return self._entries.get(path)

    def list_entries(self) -> List[LockEntry]:
        """List all non-root entries in lockfile order."""
        return list(self._entries.values())

    def installed_names(self) -> List[str]:
        """Installed package names in lockfile order."""
        return [entry.name for entry in self._entries.values()]

    def missing_integrity(self) -> List[str]:
        """Lockfile keys of entries that carry no integrity digest."""
        return [path for path, entry in self._entries.items() if not entry.has_integrity]


def _as_str(value) -> Optional[str]:
    return value if isinstance(value, str) else None
