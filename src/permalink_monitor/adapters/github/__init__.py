"""GitHub adapters."""

from permalink_monitor.adapters.github.client import GitHubClient
from permalink_monitor.adapters.github.event_source import GitHubEventSource
from permalink_monitor.adapters.github.publisher import GitHubPublisher
from permalink_monitor.adapters.github.ref_resolver import GitHubRefResolver

__all__ = ["GitHubClient", "GitHubEventSource", "GitHubPublisher", "GitHubRefResolver"]
