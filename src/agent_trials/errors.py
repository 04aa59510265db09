"""Error taxonomy for trial runs."""

from __future__ import annotations


class TrialError(Exception):
    """Base class for all errors raised by the trial runner."""


class ConfigurationError(TrialError):
    """Invalid input detected before any workspace work begins."""


class UnknownAgentError(ConfigurationError):
    """Raised when an agent name has no registered adapter."""


class ProvisioningError(TrialError):
    """Workspace could not be prepared; the workspace is unusable."""


class InvocationError(TrialError):
    """The agent process could not be spawned or exited non-zero."""


class GitError(TrialError):
    """Raised when a git command fails."""

    def __init__(self, message: str, returncode: int = 1, stdout: str = "", stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
