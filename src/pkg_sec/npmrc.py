"""Parsing and evaluation of .npmrc files."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from pkg_sec.config import NpmrcSetting


def parse_npmrc(text: str) -> Dict[str, str]:
    """
    Parse .npmrc text into a key -> value mapping.

    Blank lines and ``#`` / ``;`` comments are skipped. A line without ``=``
    is a bare key with an empty value. Later keys override earlier ones.
    """
    settings: Dict[str, str] = {}

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith(("#", ";")):
            continue

        if "=" in line:
            key, value = line.split("=", 1)
        else:
            key, value = line, ""

        key = key.strip()
        if key:
            settings[key] = value.strip().strip('"').strip("'")

    return settings


@dataclass
class SettingsEvaluation:
    """How a set of expected settings compares to a parsed .npmrc."""
    satisfied: List[NpmrcSetting] = field(default_factory=list)
    missing: List[NpmrcSetting] = field(default_factory=list)
    mismatched: List[Tuple[NpmrcSetting, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing and not self.mismatched


def evaluate_settings(
    settings: Dict[str, str],
    expected: Iterable[NpmrcSetting]
) -> SettingsEvaluation:
    """Compare parsed settings to the expected key/value pairs."""
    evaluation = SettingsEvaluation()

    for setting in expected:
        if setting.key not in settings:
            evaluation.missing.append(setting)
        elif setting.expected is not None and settings[setting.key].lower() != setting.expected.lower():
            evaluation.mismatched.append((setting, settings[setting.key]))
        else:
            evaluation.satisfied.append(setting)

    return evaluation
