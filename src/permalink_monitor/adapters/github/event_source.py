"""GitHub activity feed source."""

from datetime import datetime, timezone
from typing import Optional

from permalink_monitor.adapters.github.client import FULL_MEDIA_TYPE, GitHubClient
from permalink_monitor.core import Event, EventFilter, EventKind, EventSource, GitHubAPIError

# GitHub event type -> (kind, payload action, payload key holding the body)
EVENT_TYPES = {
    "PullRequestEvent": (EventKind.PULL_REQUEST, "opened", "pull_request"),
    "IssuesEvent": (EventKind.ISSUE, "opened", "issue"),
    "IssueCommentEvent": (EventKind.ISSUE_COMMENT, "created", "comment"),
}


class GitHubEventSource(EventSource):
    """Read new issues, pull requests and comments from the events API."""

    emoji = "🐙"
    name = "GitHub events"

    def __init__(self, client: GitHubClient, per_page: int = 30) -> None:
        self.client = client
        self.per_page = per_page

    async def fetch_events(self, options: EventFilter) -> list[Event]:
        """Fetch events from the included repos, or the public timeline."""
        if options.include_repos:
            paths = [f"/repos/{repo}/events" for repo in options.include_repos]
        else:
            paths = ["/events"]

        events: list[Event] = []
        seen_ids: set[str] = set()

        for path in paths:
            try:
                response = await self.client.request("GET", path, params={"per_page": self.per_page})
            except GitHubAPIError as e:
                print(f"  └─ ⚠️  {path}: {e}")
                continue

            try:
                feed = response.json()
            except ValueError as e:
                print(f"  └─ ⚠️  {path}: invalid JSON: {e}")
                continue

            if not isinstance(feed, list):
                print(f"  └─ ⚠️  {path}: unexpected response")
                continue

            for raw in feed:
                if not isinstance(raw, dict):
                    continue

                if str(raw.get("id")) in seen_ids:
                    continue

                event = self._create_event(raw, options)
                if event is None:
                    continue

                seen_ids.add(event.event_id)
                event.body_html = await self._fetch_body_html(raw, event)
                events.append(event)

        print(f"  └─ Found {len(events)} events to check")
        return events

    def _create_event(self, raw: dict, options: EventFilter) -> Optional[Event]:
        """Create an event from an activity feed entry, or None if it is not wanted."""
        if raw.get("type") not in EVENT_TYPES:
            return None

        kind, action, key = EVENT_TYPES[raw["type"]]
        payload = raw.get("payload") or {}
        repo = (raw.get("repo") or {}).get("name", "")

        if payload.get("action") != action or not options.accepts(kind, repo):
            return None

        resource = payload.get(key) or {}
        if kind == EventKind.ISSUE_COMMENT:
            number = (payload.get("issue") or {}).get("number", 0)
        else:
            number = resource.get("number", payload.get("number", 0))

        created_at_str = raw.get("created_at", "")

        try:
            if created_at_str:
                created_at = datetime.fromisoformat(created_at_str.replace("Z", "+00:00"))
            else:
                created_at = datetime.now(timezone.utc)

            return Event(
                event_id=str(raw.get("id", "")),
                id=resource.get("id", 0),
                number=number,
                kind=kind,
                repo=repo,
                actor=(raw.get("actor") or {}).get("login", ""),
                body=resource.get("body") or "",
                created_at=created_at,
            )
        except ValueError as e:
            print(f"      ⚠️  Skipping event {raw.get('id', '?')}: {e}")
            return None

    async def _fetch_body_html(self, raw: dict, event: Event) -> Optional[str]:
        """Fetch the rendered HTML of the event's body."""
        kind, _, key = EVENT_TYPES[raw["type"]]
        url = (raw["payload"].get(key) or {}).get("url")
        if not url or not event.body:
            return None

        try:
            response = await self.client.request("GET", url, accept=FULL_MEDIA_TYPE)
        except GitHubAPIError as e:
            print(f"      ⚠️  Could not fetch HTML for {kind.value} #{event.number}: {e}")
            return None

        try:
            data = response.json()
        except ValueError as e:
            print(f"      ⚠️  Invalid HTML response for {kind.value} #{event.number}: {e}")
            return None

        if not isinstance(data, dict):
            return None
        return data.get("body_html")
