"""Resolve branches and tags to commit SHAs through the GitHub API."""

from urllib.parse import quote

from permalink_monitor.adapters.github.client import SHA_MEDIA_TYPE, GitHubClient
from permalink_monitor.core import GitHubAPIError, RefResolver, ResolutionError

NOT_FOUND_STATUSES = (404, 409, 422)


class GitHubRefResolver(RefResolver):
    """Look up the commit a ref currently points at."""

    def __init__(self, client: GitHubClient) -> None:
        self.client = client

    async def resolve(self, owner: str, repo: str, ref: str) -> str:
        """Return the full SHA of ``ref`` in ``owner/repo``."""
        path = f"/repos/{owner}/{repo}/commits/{quote(ref, safe='')}"

        try:
            response = await self.client.request("GET", path, accept=SHA_MEDIA_TYPE)
        except GitHubAPIError as e:
            if e.status_code in NOT_FOUND_STATUSES:
                raise ResolutionError(owner, repo, ref, "no such ref") from e
            raise ResolutionError(owner, repo, ref, str(e)) from e

        sha = response.text.strip()
        if not sha:
            raise ResolutionError(owner, repo, ref, "empty response")

        return sha
