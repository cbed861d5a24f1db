"""Exception types raised while checking for and applying SDK updates.

Every fatal error derives from UpdateError so the CLI can report it in one
place. Labeling failures are the only errors handled below the top level.
"""

from __future__ import annotations


class UpdateError(Exception):
    """Base class for all update failures."""


class ConfigurationError(UpdateError):
    """Raised for missing or invalid inputs."""


class ResolutionError(UpdateError):
    """Raised when release metadata cannot be fetched or understood."""


class HttpError(ResolutionError):
    """Raised for a non-success HTTP response."""

    def __init__(self, url: str, status_code: int):
        super().__init__(f"Failed to get {url}: HTTP {status_code}")
        self.url = url
        self.status_code = status_code


class ReleaseNotFoundError(ResolutionError):
    """Raised when a release feed has no release for an SDK version."""


class GitError(UpdateError):
    """Raised when a git command exits with a non-zero status."""

    def __init__(self, args: tuple[str, ...], message: str):
        super().__init__(f"The command 'git {' '.join(args)}' failed: {message}")
        self.command = ("git", *args)
        self.stderr = message


class GitHubError(UpdateError):
    """Raised when the GitHub REST API returns an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
