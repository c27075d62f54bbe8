"""Classification of GitHub links into permanent and non-permanent ones."""

import re
from dataclasses import dataclass, field, replace
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from permalink_monitor.core.errors import MalformedLinkError

DEFAULT_HOST = "github.com"
DEFAULT_BRANCH = "master"

SHA_PATTERN = re.compile(r"^[a-f0-9]{7,40}$")
BLOB_PATH_PATTERN = re.compile(r"^/([^/]+)/([^/]+)/blob/([^/]+)/(\S*)")


@dataclass(frozen=True)
class LinkReference:
    """A parsed link on the GitHub host.

    ``owner``, ``repo`` and ``ref`` are only set when the path has the
    ``/{owner}/{repo}/blob/{ref}/{file}`` shape.
    """

    raw: str
    scheme: str
    host: str
    path: str
    query: str = ""
    fragment: str = ""
    owner: str = ""
    repo: str = ""
    ref: str = ""
    file_path: str = ""
    default_branch: str = field(default=DEFAULT_BRANCH, compare=False)

    def __str__(self) -> str:
        return self.raw

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(part for part in self.path.split("/") if part)

    @property
    def file_name(self) -> str:
        return self.file_path.rstrip("/").rsplit("/", 1)[-1]

    @property
    def has_commit_ref(self) -> bool:
        return SHA_PATTERN.match(self.ref) is not None

    @property
    def is_deep_link(self) -> bool:
        return bool(self.owner and self.repo and self.ref)

    @property
    def is_permanent(self) -> bool:
        return not self.is_deep_link or self.has_commit_ref

    @property
    def uses_default_branch(self) -> bool:
        return self.ref == self.default_branch

    def with_ref(self, ref: str) -> "LinkReference":
        """Return the same file at another ref."""
        if not self.is_deep_link:
            raise ValueError(f"Not a link to a file at a ref: {self.raw}")

        path = f"/{self.owner}/{self.repo}/blob/{ref}/{self.file_path}"
        raw = urlunsplit((self.scheme, self.host, path, self.query, self.fragment))
        return replace(self, raw=raw, path=path, ref=ref)


class LinkClassifier:
    """Turn raw hrefs into ``LinkReference`` objects for one host."""

    def __init__(self, host: str = DEFAULT_HOST, default_branch: str = DEFAULT_BRANCH) -> None:
        self.host = host
        self.default_branch = default_branch

    def classify(self, raw_url: str) -> Optional[LinkReference]:
        """Parse ``raw_url``.

        Returns:
            ``None`` when the link is not on the configured host, otherwise a
            ``LinkReference`` (with empty owner/repo/ref when the path is not
            a file-at-ref path).

        Raises:
            MalformedLinkError: If the URL cannot be parsed.
        """
        try:
            parts = urlsplit(raw_url)
        except ValueError as e:
            raise MalformedLinkError(f"Malformed URL {raw_url!r}: {e}") from e

        # Host comparison ignores credentials but keeps the port.
        host = parts.netloc.rpartition("@")[2]
        if host != self.host:
            return None

        link = LinkReference(
            raw=raw_url,
            scheme=parts.scheme,
            host=host,
            path=parts.path,
            query=parts.query,
            fragment=parts.fragment,
            default_branch=self.default_branch,
        )

        match = BLOB_PATH_PATTERN.match(parts.path)
        if match is None:
            return link

        owner, repo, ref, file_path = match.groups()
        return replace(link, owner=owner, repo=repo, ref=ref, file_path=file_path)
