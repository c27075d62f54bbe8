"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from permalink_monitor.core.corrections import DEFAULT_EXCERPT_RADIUS, DEFAULT_IGNORE_FILES
from permalink_monitor.core.entities import EventFilter, EventKind
from permalink_monitor.core.links import DEFAULT_BRANCH, DEFAULT_HOST


@dataclass
class GitHubConfig:
    """GitHub API settings."""
    api_base: str = "https://api.github.com"
    timeout: float = 30.0
    max_retries: int = 3
    initial_retry_delay: float = 2.0
    per_page: int = 30


@dataclass
class LinksConfig:
    """Link classification settings."""
    host: str = DEFAULT_HOST
    default_branch: str = DEFAULT_BRANCH
    excerpt_radius: int = DEFAULT_EXCERPT_RADIUS
    ignore_files: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_FILES))


@dataclass
class MonitoringConfig:
    """Polling settings."""
    interval: int = 5
    retention_days: int = 90
    events: list[str] = field(default_factory=lambda: [kind.value for kind in EventKind])
    include_repos: list[str] = field(default_factory=list)
    exclude_repos: list[str] = field(default_factory=list)
    include_users: list[str] = field(default_factory=list)
    exclude_users: list[str] = field(default_factory=list)


@dataclass
class PathsConfig:
    """Path settings."""
    db_dir: Path = Path.home() / ".permalink-monitor"


@dataclass
class Settings:
    """Application settings."""

    # API token (from environment only)
    github_token: Optional[str] = None

    # Config sections
    github: GitHubConfig = field(default_factory=GitHubConfig)
    links: LinksConfig = field(default_factory=LinksConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    @property
    def db_dir(self) -> Path:
        return self.paths.db_dir

    @property
    def interval(self) -> int:
        return self.monitoring.interval

    def event_filter(self) -> EventFilter:
        """Build the event filter from the monitoring section."""
        return EventFilter(
            kinds=[EventKind(kind) for kind in self.monitoring.events],
            include_repos=list(self.monitoring.include_repos),
            exclude_repos=list(self.monitoring.exclude_repos),
            include_users=list(self.monitoring.include_users),
            exclude_users=list(self.monitoring.exclude_users),
        )


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(
        github_token=os.getenv("GITHUB_TOKEN") or os.getenv("GLC_AUTH_TOKEN"),
    )

    if "github" in config:
        for key, value in config["github"].items():
            setattr(settings.github, key, value)

    if "links" in config:
        for key, value in config["links"].items():
            setattr(settings.links, key, value)

    if "monitoring" in config:
        for key, value in config["monitoring"].items():
            setattr(settings.monitoring, key, value)

    if "paths" in config:
        for key, value in config["paths"].items():
            setattr(settings.paths, key, Path(value).expanduser())

    return settings
