"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from permalink_monitor.core.links import LinkReference


class EventKind(str, Enum):
    """Kind of GitHub activity whose body can be corrected."""

    PULL_REQUEST = "pull_request"
    ISSUE = "issue"
    ISSUE_COMMENT = "issue_comment"


class FailureKind(str, Enum):
    """Why a link in a body could not be corrected."""

    MALFORMED = "malformed"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Correction:
    """A non-permanent link, its permanent version and where it was found."""

    original: LinkReference
    replacement: LinkReference
    context: str


@dataclass(frozen=True)
class LinkFailure:
    """A link that was skipped because of an error."""

    href: str
    reason: str
    kind: FailureKind


@dataclass
class CorrectionResult:
    """Corrections found in one body plus the links that failed."""

    corrections: list[Correction] = field(default_factory=list)
    failures: list[LinkFailure] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


@dataclass
class EventFilter:
    """Which activity to look at."""

    kinds: list[EventKind] = field(default_factory=lambda: list(EventKind))
    include_repos: list[str] = field(default_factory=list)
    exclude_repos: list[str] = field(default_factory=list)
    include_users: list[str] = field(default_factory=list)
    exclude_users: list[str] = field(default_factory=list)

    def accepts(self, kind: EventKind, repo: str) -> bool:
        """Check whether an event of ``kind`` in ``repo`` should be processed."""
        if kind not in self.kinds:
            return False

        repo = repo.lower()
        owner = repo.split("/", 1)[0]

        if self.include_repos and repo not in {r.lower() for r in self.include_repos}:
            return False
        if repo in {r.lower() for r in self.exclude_repos}:
            return False
        if self.include_users and owner not in {u.lower() for u in self.include_users}:
            return False
        if owner in {u.lower() for u in self.exclude_users}:
            return False

        return True


@dataclass
class Event:
    """A piece of GitHub activity whose body may contain links to fix."""

    event_id: str
    id: int
    number: int
    kind: EventKind
    repo: str
    actor: str
    body: str
    created_at: datetime
    body_html: Optional[str] = None
    corrections: list[Correction] = field(default_factory=list)
    failures: list[LinkFailure] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.event_id:
            raise ValueError("Event id cannot be empty")
        if self.repo.count("/") != 1 or not all(self.repo.split("/")):
            raise ValueError(f"Repository must be in owner/name format: {self.repo!r}")

    @property
    def repo_owner(self) -> str:
        return self.repo.split("/")[0]

    @property
    def repo_name(self) -> str:
        return self.repo.split("/")[1]

    @property
    def html(self) -> str:
        """Markup to search for links."""
        return self.body_html if self.body_html is not None else self.body

    @property
    def html_missing(self) -> bool:
        """True when the body has text but its rendered HTML is not available."""
        return self.body_html is None and bool(self.body.strip())
