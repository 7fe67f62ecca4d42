"""Verification checks for npm-compatible projects."""

from .npmrc import NpmrcScanner
from .integrity import IntegrityScanner
from .audit import AuditScanner
from .signatures import SignatureScanner
from .trusted import TrustPolicyScanner

__all__ = [
    "NpmrcScanner",
    "IntegrityScanner",
    "AuditScanner",
    "SignatureScanner",
    "TrustPolicyScanner"
]
