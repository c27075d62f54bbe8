"""Error types raised by the core and the GitHub adapters."""

from typing import Optional


class PermalinkMonitorError(Exception):
    """Base class for all errors raised by this package."""


class MalformedLinkError(PermalinkMonitorError, ValueError):
    """A link could not be parsed as a URL."""


class MarkupError(PermalinkMonitorError):
    """An HTML fragment could not be turned into a tree."""


class RenderError(PermalinkMonitorError):
    """An excerpt tree could not be serialized back to markup."""


class ResolutionError(PermalinkMonitorError):
    """A ref could not be mapped to a commit."""

    def __init__(self, owner: str, repo: str, ref: str, reason: str = "") -> None:
        self.owner = owner
        self.repo = repo
        self.ref = ref
        self.reason = reason
        message = f"cannot resolve {owner}/{repo}@{ref}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class GitHubAPIError(PermalinkMonitorError):
    """GitHub answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)
