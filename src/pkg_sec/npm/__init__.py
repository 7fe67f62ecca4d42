"""npm collaborator interface."""

from .client import NpmClient, NpmCli, CommandResult
from .parsing import AuditParseError, parse_audit_output, parse_npm_version

__all__ = [
    "NpmClient",
    "NpmCli",
    "CommandResult",
    "AuditParseError",
    "parse_audit_output",
    "parse_npm_version"
]
