"""
cargo-mirror error classes.

Environment-level errors abort the run; fetch errors are caught per package
by the resolver and turned into outcomes.
"""
from __future__ import annotations


class CargoMirrorError(Exception):
    """Base class for all cargo-mirror errors."""
    pass


class ConfigurationError(CargoMirrorError):
    """
    The run has no usable environment.

    Raised when:
    - Neither $CARGO_HOME nor $HOME is set
    - The project root cannot be located
    """
    pass


class LockfileError(ConfigurationError):
    """Cargo.lock is missing, unreadable or malformed."""
    pass


class CargoError(CargoMirrorError):
    """A cargo invocation needed before resolving failed."""
    pass


class IndexUpdateError(CargoError):
    """Cargo ran but could not refresh the registry index; the local copy is stale."""
    pass


class ArtifactDownloadError(CargoMirrorError):
    """
    Fetching a crate from the mirror failed.

    Raised when:
    - The mirror answers with a status other than 200
    - The connection fails or times out
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ArtifactNotFound(ArtifactDownloadError):
    """HTTP 404 from the mirror."""
    pass


class ChecksumNotFound(CargoMirrorError):
    """The local index has no record for the requested name and version."""
    pass


class PersistError(CargoMirrorError):
    """Writing a verified crate into the cache failed."""
    pass


__all__ = [
    "CargoMirrorError",
    "ConfigurationError",
    "LockfileError",
    "CargoError",
    "IndexUpdateError",
    "ArtifactDownloadError",
    "ArtifactNotFound",
    "ChecksumNotFound",
    "PersistError",
]
