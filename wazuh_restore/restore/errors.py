"""Fatal error types for the restore run.

Every exception here aborts the run with exit code 1. Recoverable problems
are logged as warnings and never raised.
"""


class RestoreError(Exception):
    """Base class for fatal restore errors."""


class PrecheckFailure(RestoreError):
    """Raised when the run lacks root privilege or a usable backup directory."""


class PolicyViolation(RestoreError):
    """Raised when a cleanup target is outside the allowed cleanup directories."""


class IntegrityFailure(RestoreError):
    """Raised when the checksum manifest does not match the backup contents."""


class CommandFailed(RestoreError):
    """Raised when a command whose failure policy is fatal exits non-zero."""

    def __init__(self, message, command=None, returncode=None):
        super().__init__(message)
        self.command = command
        self.returncode = returncode


class CleanupFailure(RestoreError):
    """Raised when an allowed directory could not be emptied."""


class LockError(RestoreError):
    """Raised when another restore instance holds the run lock."""
