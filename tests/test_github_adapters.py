"""Tests for GitHub adapters."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from permalink_monitor.adapters.github import (
    GitHubClient,
    GitHubEventSource,
    GitHubPublisher,
    GitHubRefResolver,
)
from permalink_monitor.adapters.github.client import FULL_MEDIA_TYPE, SHA_MEDIA_TYPE
from permalink_monitor.config import GitHubConfig
from permalink_monitor.core import Event, EventFilter, EventKind, GitHubAPIError, ResolutionError

SHA = "0123456789abcdef0123456789abcdef01234567"


@pytest.fixture
def config() -> GitHubConfig:
    """Create config with fast retries."""
    return GitHubConfig(max_retries=3, initial_retry_delay=0.0)


def make_response(status_code: int = 200, json_data=None, text: str = "") -> MagicMock:
    """Create mock httpx response."""
    response = MagicMock()
    response.status_code = status_code
    response.headers = {}
    response.json.return_value = json_data
    response.text = text
    return response


def make_event() -> Event:
    """Create test pull request event."""
    return Event(
        event_id="1",
        id=10,
        number=3,
        kind=EventKind.PULL_REQUEST,
        repo="acme/widget",
        actor="alice",
        body="body",
        created_at=datetime.now(timezone.utc),
    )


def patch_http(*responses):
    """Patch httpx.AsyncClient so requests return ``responses`` in order."""
    patcher = patch("httpx.AsyncClient")
    mock_client_class = patcher.start()
    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    mock_client.request.side_effect = list(responses)
    mock_client_class.return_value = mock_client
    return patcher, mock_client


@pytest.mark.asyncio
async def test_client_sends_headers(config: GitHubConfig) -> None:
    """Test token and media type headers are sent."""
    patcher, mock_client = patch_http(make_response(json_data=[]))
    try:
        client = GitHubClient(config, token="test-token")
        await client.request("GET", "/events", params={"per_page": 5})
    finally:
        patcher.stop()

    call = mock_client.request.call_args
    assert call.args == ("GET", "https://api.github.com/events")
    assert call.kwargs["headers"]["Authorization"] == "Bearer test-token"
    assert call.kwargs["headers"]["Accept"] == "application/vnd.github+json"
    assert call.kwargs["params"] == {"per_page": 5}


@pytest.mark.asyncio
async def test_client_absolute_url_without_token(config: GitHubConfig) -> None:
    """Test absolute API URLs are used as is and no token header is sent."""
    patcher, mock_client = patch_http(make_response(json_data={}))
    try:
        await GitHubClient(config).request("GET", "https://api.github.com/repos/a/b/issues/1")
    finally:
        patcher.stop()

    call = mock_client.request.call_args
    assert call.args[1] == "https://api.github.com/repos/a/b/issues/1"
    assert "Authorization" not in call.kwargs["headers"]


@pytest.mark.asyncio
async def test_client_retries_server_error(config: GitHubConfig) -> None:
    """Test retry on 5xx followed by success."""
    patcher, mock_client = patch_http(make_response(502), make_response(200, json_data={"ok": True}))
    try:
        response = await GitHubClient(config).request("GET", "/events")
    finally:
        patcher.stop()

    assert response.json() == {"ok": True}
    assert mock_client.request.call_count == 2


@pytest.mark.asyncio
async def test_client_retries_network_error(config: GitHubConfig) -> None:
    """Test retry on connection errors."""
    patcher, mock_client = patch_http(httpx.ConnectError("boom"), make_response(200, json_data=[]))
    try:
        await GitHubClient(config).request("GET", "/events")
    finally:
        patcher.stop()

    assert mock_client.request.call_count == 2


@pytest.mark.asyncio
async def test_client_gives_up_after_retries(config: GitHubConfig) -> None:
    """Test exhausted retries raise with the last status."""
    patcher, mock_client = patch_http(make_response(429), make_response(503), make_response(503))
    try:
        with pytest.raises(GitHubAPIError) as exc_info:
            await GitHubClient(config).request("GET", "/events")
    finally:
        patcher.stop()

    assert exc_info.value.status_code == 503
    assert mock_client.request.call_count == 3


@pytest.mark.asyncio
async def test_client_does_not_retry_client_error(config: GitHubConfig) -> None:
    """Test 4xx errors are raised immediately."""
    patcher, mock_client = patch_http(make_response(401, json_data={"message": "Bad credentials"}))
    try:
        with pytest.raises(GitHubAPIError, match="Bad credentials") as exc_info:
            await GitHubClient(config).request("GET", "/events")
    finally:
        patcher.stop()

    assert exc_info.value.status_code == 401
    assert mock_client.request.call_count == 1


@pytest.mark.asyncio
async def test_resolver_returns_sha() -> None:
    """Test resolving a branch to its commit."""
    client = AsyncMock()
    client.request.return_value = make_response(text=SHA + "\n")

    sha = await GitHubRefResolver(client).resolve("acme", "widget", "feature/x")

    assert sha == SHA
    client.request.assert_called_once_with(
        "GET", "/repos/acme/widget/commits/feature%2Fx", accept=SHA_MEDIA_TYPE
    )


@pytest.mark.asyncio
async def test_resolver_missing_ref() -> None:
    """Test an unknown ref raises a resolution error."""
    client = AsyncMock()
    client.request.side_effect = GitHubAPIError("not found", 404)

    with pytest.raises(ResolutionError, match="no such ref") as exc_info:
        await GitHubRefResolver(client).resolve("acme", "widget", "gone")

    assert exc_info.value.ref == "gone"


@pytest.mark.asyncio
async def test_resolver_other_api_error() -> None:
    """Test other API failures are also reported as resolution errors."""
    client = AsyncMock()
    client.request.side_effect = GitHubAPIError("server down", 503)

    with pytest.raises(ResolutionError, match="server down"):
        await GitHubRefResolver(client).resolve("acme", "widget", "master")


RAW_EVENTS = [
    {
        "id": "1",
        "type": "IssueCommentEvent",
        "actor": {"login": "alice"},
        "repo": {"name": "acme/widget"},
        "created_at": "2024-01-15T10:00:00Z",
        "payload": {
            "action": "created",
            "issue": {"number": 7},
            "comment": {
                "id": 555,
                "body": "See https://github.com/acme/widget/blob/master/a.py",
                "url": "https://api.github.com/repos/acme/widget/issues/comments/555",
            },
        },
    },
    {
        "id": "2",
        "type": "PushEvent",
        "actor": {"login": "bob"},
        "repo": {"name": "acme/widget"},
        "payload": {},
    },
    {
        "id": "3",
        "type": "PullRequestEvent",
        "actor": {"login": "carol"},
        "repo": {"name": "acme/widget"},
        "created_at": "2024-01-15T11:00:00Z",
        "payload": {
            "action": "closed",
            "number": 9,
            "pull_request": {"id": 900, "number": 9, "body": "x", "url": "u"},
        },
    },
    {
        "id": "4",
        "type": "IssuesEvent",
        "actor": {"login": "dave"},
        "repo": {"name": "other/repo"},
        "created_at": "2024-01-15T12:00:00Z",
        "payload": {
            "action": "opened",
            "issue": {
                "id": 400,
                "number": 12,
                "body": "Body",
                "url": "https://api.github.com/repos/other/repo/issues/12",
            },
        },
    },
]


def fake_api(method: str, path: str, **kwargs) -> MagicMock:
    """Answer event feed and resource requests."""
    if path in ("/events", "/repos/acme/widget/events"):
        return make_response(json_data=RAW_EVENTS)
    if path.endswith("/comments/555"):
        return make_response(json_data={"body_html": "<p>comment html</p>"})
    if path.endswith("/issues/12"):
        return make_response(json_data={"body_html": "<p>issue html</p>"})
    raise AssertionError(f"unexpected request {method} {path}")


@pytest.mark.asyncio
async def test_event_source_parses_public_timeline() -> None:
    """Test opened issues and new comments are turned into events."""
    client = AsyncMock()
    client.request.side_effect = fake_api

    events = await GitHubEventSource(client).fetch_events(EventFilter())

    assert [e.event_id for e in events] == ["1", "4"]

    comment = events[0]
    assert comment.kind == EventKind.ISSUE_COMMENT
    assert comment.id == 555
    assert comment.number == 7
    assert comment.actor == "alice"
    assert comment.repo == "acme/widget"
    assert comment.body.startswith("See https://github.com")
    assert comment.body_html == "<p>comment html</p>"
    assert comment.created_at.year == 2024

    issue = events[1]
    assert issue.kind == EventKind.ISSUE
    assert issue.number == 12
    assert issue.body_html == "<p>issue html</p>"

    html_call = client.request.call_args_list[1]
    assert html_call.kwargs["accept"] == FULL_MEDIA_TYPE


@pytest.mark.asyncio
async def test_event_source_included_repos_and_kinds() -> None:
    """Test repository feeds are used and filters applied."""
    client = AsyncMock()
    client.request.side_effect = fake_api

    options = EventFilter(kinds=[EventKind.ISSUE_COMMENT], include_repos=["acme/widget"])
    events = await GitHubEventSource(client).fetch_events(options)

    assert [e.event_id for e in events] == ["1"]
    assert client.request.call_args_list[0].args == ("GET", "/repos/acme/widget/events")


@pytest.mark.asyncio
async def test_event_source_feed_error() -> None:
    """Test a failing feed yields no events instead of raising."""
    client = AsyncMock()
    client.request.side_effect = GitHubAPIError("forbidden", 403)

    assert await GitHubEventSource(client).fetch_events(EventFilter()) == []


@pytest.mark.asyncio
async def test_publisher_edit_paths() -> None:
    """Test each event kind is edited through its own endpoint."""
    client = AsyncMock()
    publisher = GitHubPublisher(client)

    event = make_event()
    await publisher.apply_correction(event, "new body")
    client.request.assert_called_with("PATCH", "/repos/acme/widget/pulls/3", json={"body": "new body"})

    event.kind = EventKind.ISSUE
    await publisher.apply_correction(event, "new body")
    client.request.assert_called_with("PATCH", "/repos/acme/widget/issues/3", json={"body": "new body"})

    event.kind = EventKind.ISSUE_COMMENT
    await publisher.apply_correction(event, "new body")
    client.request.assert_called_with(
        "PATCH", "/repos/acme/widget/issues/comments/10", json={"body": "new body"}
    )


@pytest.mark.asyncio
async def test_publisher_post_comment() -> None:
    """Test commenting returns the new comment id."""
    client = AsyncMock()
    client.request.return_value = make_response(201, json_data={"id": 999})

    comment_id = await GitHubPublisher(client).post_comment(make_event(), "hello")

    assert comment_id == 999
    client.request.assert_called_once_with(
        "POST", "/repos/acme/widget/issues/3/comments", json={"body": "hello"}
    )


@pytest.mark.asyncio
async def test_event_source_invalid_feed_json() -> None:
    """Test a feed that is not JSON yields no events instead of raising."""
    client = AsyncMock()
    response = make_response()
    response.json.side_effect = ValueError("Expecting value")
    client.request.return_value = response

    assert await GitHubEventSource(client).fetch_events(EventFilter()) == []


@pytest.mark.asyncio
async def test_event_source_skips_bad_timestamp() -> None:
    """Test an entry with an unparsable date is skipped and the rest kept."""
    bad = dict(RAW_EVENTS[3], id="5", created_at="yesterday")
    client = AsyncMock()

    def answer(method: str, path: str, **kwargs) -> MagicMock:
        if path == "/events":
            return make_response(json_data=[bad, RAW_EVENTS[3]])
        return fake_api(method, path, **kwargs)

    client.request.side_effect = answer

    events = await GitHubEventSource(client).fetch_events(EventFilter())

    assert [e.event_id for e in events] == ["4"]


@pytest.mark.asyncio
async def test_event_source_invalid_html_json() -> None:
    """Test an unreadable HTML response leaves body_html unset."""
    client = AsyncMock()

    def answer(method: str, path: str, **kwargs) -> MagicMock:
        if path == "/events":
            return make_response(json_data=[RAW_EVENTS[3]])
        response = make_response()
        response.json.side_effect = ValueError("Expecting value")
        return response

    client.request.side_effect = answer

    events = await GitHubEventSource(client).fetch_events(EventFilter())

    assert len(events) == 1
    assert events[0].body_html is None
