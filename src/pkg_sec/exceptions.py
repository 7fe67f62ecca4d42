"""Exceptions raised by pkg-sec."""


class PkgSecError(Exception):
    """Base class for pkg-sec errors."""
    pass


class LockFileError(PkgSecError):
    """Raised when package-lock.json cannot be read or parsed."""
    pass


class TrustPolicyError(PkgSecError):
    """Raised when trusted-packages.json is missing or invalid."""
    pass


class NpmCommandError(PkgSecError):
    """Raised when the npm executable cannot be launched."""
    pass
