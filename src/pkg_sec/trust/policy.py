"""Loading and validation of trusted-packages.json."""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from jsonschema import validate, ValidationError

from pkg_sec.exceptions import TrustPolicyError
from pkg_sec.models import TrustEntry, TrustPolicy

logger = logging.getLogger(__name__)


# Structural schema only. Malformed entries become incomplete TrustEntry
# records and are reported as warnings by the scanner.
TRUST_POLICY_SCHEMA = {
    "type": "object",
    "properties": {
        "packages": {"type": ["array", "null"]}
    }
}


def load_trust_policy(policy_path: Path) -> TrustPolicy:
    """
    Load and validate a trust policy document.

    Raises:
        TrustPolicyError: If the file is missing, not JSON, or not shaped
            like a trust policy
    """
    if not policy_path.exists():
        raise TrustPolicyError(f"{policy_path.name} not found")

    try:
        data = json.loads(policy_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise TrustPolicyError(f"Failed to parse {policy_path.name}: {e}")

    try:
        validate(data, TRUST_POLICY_SCHEMA)
    except ValidationError as e:
        raise TrustPolicyError(f"{policy_path.name} does not match the trust policy schema: {e.message}")

    policy = TrustPolicy(
        last_reviewed=_as_text(data.get("lastReviewed")),
        review_cadence=_as_text(data.get("reviewCadence")),
        packages=[_coerce_entry(item) for item in data.get("packages") or []]
    )
    logger.debug(f"Loaded {len(policy.packages)} trust entries from {policy_path}")
    return policy


def parse_review_date(value: str) -> date:
    """Parse a lastReviewed value (ISO date, optionally with a time part)."""
    return date.fromisoformat(value.strip()[:10])


def review_age_days(policy: TrustPolicy, today: Optional[date] = None) -> Optional[int]:
    """
    Days elapsed since the policy was last reviewed.

    Returns None when the policy has no lastReviewed date.

    Raises:
        ValueError: If lastReviewed is not a recognisable date
    """
    if not policy.last_reviewed:
        return None
    today = today or date.today()
    return (today - parse_review_date(policy.last_reviewed)).days


def _as_text(value) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


def _coerce_entry(item) -> TrustEntry:
    """Build a TrustEntry, dropping name/reason values that are not strings."""
    raw = json.dumps(item)
    if not isinstance(item, dict):
        return TrustEntry(raw=raw)

    def text(key):
        value = item.get(key)
        return value if isinstance(value, str) else None

    return TrustEntry(
        name=text("name"),
        reason=text("reason"),
        last_reviewed=text("lastReviewed"),
        raw=raw
    )
