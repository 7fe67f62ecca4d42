"""Trust policy (allow-list) handling and selective script execution."""

from .policy import TRUST_POLICY_SCHEMA, load_trust_policy, review_age_days
from .matcher import matches_entry, matches_trusted, select_trusted
from .runner import TrustedScriptRunner, RunPlan, RunReport

__all__ = [
    "TRUST_POLICY_SCHEMA",
    "load_trust_policy",
    "review_age_days",
    "matches_entry",
    "matches_trusted",
    "select_trusted",
    "TrustedScriptRunner",
    "RunPlan",
    "RunReport"
]
