"""Write corrections back to GitHub."""

from permalink_monitor.adapters.github.client import GitHubClient
from permalink_monitor.core import Event, EventKind, EventPublisher


class GitHubPublisher(EventPublisher):
    """Edit event bodies and post comments with the GitHub REST API."""

    def __init__(self, client: GitHubClient) -> None:
        self.client = client

    def _edit_path(self, event: Event) -> str:
        base = f"/repos/{event.repo_owner}/{event.repo_name}"
        if event.kind == EventKind.PULL_REQUEST:
            return f"{base}/pulls/{event.number}"
        if event.kind == EventKind.ISSUE:
            return f"{base}/issues/{event.number}"
        return f"{base}/issues/comments/{event.id}"

    async def apply_correction(self, event: Event, new_body: str) -> None:
        """Replace the body of the pull request, issue or comment."""
        await self.client.request("PATCH", self._edit_path(event), json={"body": new_body})

    async def post_comment(self, event: Event, comment_body: str) -> int:
        """Comment on the issue or pull request the event belongs to."""
        path = f"/repos/{event.repo_owner}/{event.repo_name}/issues/{event.number}/comments"
        response = await self.client.request("POST", path, json={"body": comment_body})
        return response.json()["id"]
