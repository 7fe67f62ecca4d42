"""Configuration for the package security verifier."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".pkgsec.toml"
ENV_PREFIX = "PKG_SEC_"


class NpmrcSetting(BaseModel):
    """A .npmrc key and the value it must hold.

    ``expected`` of None means any value counts as configured.
    """
    key: str
    expected: Optional[str] = None

    def __str__(self) -> str:
        if self.expected is None:
            return self.key
        return f"{self.key}={self.expected}"


class ScannerConfig(BaseModel):
    """Scanner configuration."""

    # Input files, relative to the project directory
    lockfile_name: str = "package-lock.json"
    alt_lockfile_name: str = "bun.lockb"
    npmrc_name: str = ".npmrc"
    trust_policy_name: str = "trusted-packages.json"

    # npm executable
    npm_bin: str = "npm"

    # Integrity policy: percent of entries that must carry a digest
    coverage_threshold: float = 95.0
    strong_hash_prefix: str = "sha512-"
    missing_preview_limit: int = 10

    # Audit
    audit_fallback_level: str = "high"

    # Signature verification landed in npm 8.15
    min_signature_npm_version: List[int] = Field(default_factory=lambda: [8, 15])
    signature_timeout_seconds: int = 30

    # Trust policy review cadence
    review_max_age_days: int = 90

    # Selective script execution
    rebuild_timeout_seconds: int = 60

    required_settings: List[NpmrcSetting] = Field(default_factory=lambda: [
        NpmrcSetting(key="ignore-scripts", expected="true"),
        NpmrcSetting(key="audit-level"),
        NpmrcSetting(key="package-lock", expected="true"),
        NpmrcSetting(key="strict-ssl", expected="true"),
    ])

    recommended_settings: List[NpmrcSetting] = Field(default_factory=lambda: [
        NpmrcSetting(key="save-exact", expected="true"),
        NpmrcSetting(key="engine-strict", expected="true"),
        NpmrcSetting(key="prefer-offline", expected="true"),
        NpmrcSetting(key="optional", expected="false"),
    ])


# Environment variables understood by load_config, mapped to field names
ENV_OVERRIDES = {
    "NPM_BIN": "npm_bin",
    "REBUILD_TIMEOUT": "rebuild_timeout_seconds",
    "REVIEW_MAX_AGE_DAYS": "review_max_age_days",
    "COVERAGE_THRESHOLD": "coverage_threshold",
}


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        data = toml.loads(path.read_text())
    except (OSError, toml.TomlDecodeError) as e:
        raise ValueError(f"Failed to load {path.name}: {e}")

    # Settings may live at top level or under a [pkg-sec] table
    return data.get("pkg-sec", data)


def load_config(base_dir: Optional[Path] = None) -> ScannerConfig:
    """
    Build the effective configuration.

    Defaults are overlaid with ``.pkgsec.toml`` from ``base_dir`` (if present)
    and then with ``PKG_SEC_*`` environment variables.

    Args:
        base_dir: Project directory holding the optional config file

    Returns:
        The merged configuration
    """
    values: Dict[str, Any] = {}

    if base_dir is not None:
        config_path = Path(base_dir) / CONFIG_FILENAME
        if config_path.exists():
            values.update(_read_config_file(config_path))
            logger.debug(f"Loaded configuration from {config_path}")

    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.getenv(ENV_PREFIX + env_name)
        if value is not None:
            values[field_name] = value
            logger.debug(f"Configuration override from {ENV_PREFIX}{env_name}")

    return ScannerConfig(**values)


config = ScannerConfig()
