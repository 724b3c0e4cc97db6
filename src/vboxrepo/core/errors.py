from __future__ import annotations

"""Exceptions raised by vboxrepo.

Every fatal condition derives from VBoxRepoError so the CLI can turn it into
an error message and a non-zero exit status.
"""


class VBoxRepoError(Exception):
    """Base class for all fatal vboxrepo errors."""


class NotRootError(VBoxRepoError):
    """Raised when an operation that mutates the system runs without root."""


class DistroDetectionError(VBoxRepoError):
    """Raised when the distribution metadata cannot be read."""


class UnsupportedDistroError(VBoxRepoError):
    """Raised when the detected distribution has no installer."""

    def __init__(self, distro_id: str, message: str | None = None):
        self.distro_id = distro_id
        super().__init__(message or f"Unsupported distribution: {distro_id}")


class PackageManagerError(VBoxRepoError):
    """Raised when an external command exits non-zero or cannot be started."""

    def __init__(self, command: list[str], returncode: int | None, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        cmd = " ".join(command)
        if returncode is None:
            message = f"Command not found: {cmd}"
        else:
            message = f"Command failed with exit code {returncode}: {cmd}"
        if stderr:
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)


class LockTimeoutError(VBoxRepoError):
    """Raised when package manager locks stay held past the configured timeout."""


class DownloadError(VBoxRepoError):
    """Raised when a remote resource cannot be fetched."""


class SetupAborted(VBoxRepoError):
    """Raised when the operator declines the confirmation prompt."""
