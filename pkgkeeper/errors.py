"""PkgKeeper exception hierarchy."""

import re

CREDENTIALS_PATTERN = re.compile(r"//[^@/\s]+@")


def mask_credentials(text: str) -> str:
    """Hide the user-info part of any URL in ``text``."""
    return CREDENTIALS_PATTERN.sub("//***@", text)


class PkgKeeperError(Exception):
    """Base exception for PkgKeeper errors."""


class PackageLookupError(PkgKeeperError):
    """Raised when a package index cannot be queried."""


class UpdateApplyError(PkgKeeperError):
    """Raised when a manifest cannot be rewritten for an update."""


class RestoreError(PkgKeeperError):
    """Raised when dependencies cannot be restored after an update."""


class GitCommandError(PkgKeeperError):
    """Raised when a git command exits non-zero."""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = [mask_credentials(arg) for arg in command]
        self.returncode = returncode
        self.stderr = mask_credentials(stderr)
        super().__init__(
            f"git {' '.join(self.command[1:])} failed ({returncode}): {self.stderr}"
        )


class PullRequestError(PkgKeeperError):
    """Raised when the pull request host rejects a request."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class PullRequestAuthError(PullRequestError):
    """Raised when authentication with the pull request host fails (401)."""

    def __init__(self, message: str = "Authentication failed. Check GITHUB_TOKEN."):
        super().__init__(message, status_code=401)
