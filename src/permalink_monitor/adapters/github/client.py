"""Thin GitHub REST client with retry logic."""

import asyncio
from typing import Any, Optional

import httpx

from permalink_monitor.config import GitHubConfig
from permalink_monitor.core.errors import GitHubAPIError

JSON_MEDIA_TYPE = "application/vnd.github+json"
FULL_MEDIA_TYPE = "application/vnd.github.full+json"
SHA_MEDIA_TYPE = "application/vnd.github.sha"
API_VERSION = "2022-11-28"


class GitHubClient:
    """Send requests to the GitHub API, retrying rate limits and server errors."""

    def __init__(self, config: GitHubConfig, token: Optional[str] = None) -> None:
        self.config = config
        self.token = token
        self.api_base = config.api_base.rstrip("/")

    async def request(
        self,
        method: str,
        path: str,
        accept: str = JSON_MEDIA_TYPE,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send a request and return the successful response.

        ``path`` may be relative to the API base or an absolute API URL.

        Raises:
            GitHubAPIError: On a client error, or once retries are exhausted.
        """
        url = path if path.startswith(("http://", "https://")) else f"{self.api_base}{path}"
        headers = self._get_headers(accept)
        last_error: Optional[GitHubAPIError] = None

        for attempt in range(self.config.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                    response = await client.request(method, url, headers=headers, params=params, json=json)
            except httpx.RequestError as e:
                last_error = GitHubAPIError(f"{method} {url} failed: {e}")
                retry_delay = self.config.initial_retry_delay * (2 ** attempt)
                print(f"⚠️  Network error, retrying after {retry_delay:.1f}s")
                await asyncio.sleep(retry_delay)
                continue

            if response.status_code < 300:
                return response

            if response.status_code == 429 or response.status_code >= 500:
                last_error = GitHubAPIError(
                    f"{method} {url} returned {response.status_code}", response.status_code
                )
                retry_delay = self._get_retry_delay(response, attempt)
                print(f"⏳ GitHub returned {response.status_code}, retrying after {retry_delay:.1f}s "
                      f"(attempt {attempt + 1}/{self.config.max_retries})")
                await asyncio.sleep(retry_delay)
                continue

            raise GitHubAPIError(
                f"{method} {url} returned {response.status_code}: {self._error_message(response)}",
                response.status_code,
            )

        if last_error:
            raise last_error
        raise GitHubAPIError(f"{method} {url} was not attempted, max_retries is {self.config.max_retries}")

    def _get_retry_delay(self, response: httpx.Response, attempt: int) -> float:
        """Calculate retry delay from response headers or use exponential backoff."""
        retry_after = response.headers.get("retry-after")
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass

        return self.config.initial_retry_delay * (2 ** attempt)

    def _error_message(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text

        if isinstance(data, dict) and "message" in data:
            return str(data["message"])
        return response.text

    def _get_headers(self, accept: str) -> dict[str, str]:
        """Get headers for GitHub API requests."""
        headers = {
            "Accept": accept,
            "X-GitHub-Api-Version": API_VERSION,
        }

        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        return headers
