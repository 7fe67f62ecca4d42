"""Matching installed packages against the trust policy."""

from typing import Iterable, List, Optional

from pkg_sec.models import TrustEntry


def matches_entry(package_name: str, entry: TrustEntry) -> bool:
    """
    True if ``package_name`` is covered by ``entry``.

    A package is covered when its name equals the entry name or sits below
    it as a path (``<entry>/...``). ``foo-bar`` is not covered by ``foo``.
    """
    if not entry.name:
        return False
    return package_name == entry.name or package_name.startswith(entry.name + "/")


def find_trust_entry(package_name: str, trusted: Iterable[TrustEntry]) -> Optional[TrustEntry]:
    """First trust entry covering ``package_name``, if any."""
    for entry in trusted:
        if matches_entry(package_name, entry):
            return entry
    return None


def matches_trusted(package_name: str, trusted: Iterable[TrustEntry]) -> bool:
    return find_trust_entry(package_name, trusted) is not None


def select_trusted(installed: Iterable[str], trusted: Iterable[TrustEntry]) -> List[str]:
    """Installed names covered by the trust list, in installed order."""
    trusted = list(trusted)
    return [name for name in installed if matches_trusted(name, trusted)]
