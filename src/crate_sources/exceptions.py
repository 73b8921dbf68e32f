"""Crate source exceptions.

Every failure carries a human-readable message plus a context dict naming the
crate, index, URL or command involved.
"""


class CrateSourceError(Exception):
    """Base exception for crate source operations."""

    def __init__(self, message: str, context: dict | None = None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dict with additional context (crate, index, url, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class DownloadError(CrateSourceError):
    """HTTP transfer failed or returned a non-success status."""


class CommandError(CrateSourceError):
    """External command exited with a non-zero status."""

    @property
    def stderr_lines(self) -> list[str]:
        return self.context.get("stderr", [])


class RegistryIndexError(CrateSourceError):
    """Registry index could not be cloned, updated or read."""


class IndexConfigError(RegistryIndexError):
    """Registry index config.json is malformed."""


class InvalidUrlError(CrateSourceError):
    """A download URL could not be parsed."""


class UnpackError(CrateSourceError):
    """Crate archive could not be extracted."""


class GitRepositoryError(CrateSourceError):
    """Git repository could not be cloned, updated or checked out."""


class PrivateRepositoryError(GitRepositoryError):
    """Git repository requires credentials."""
