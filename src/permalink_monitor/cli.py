"""CLI entry point for permalink monitor."""

import asyncio
from datetime import date
from pathlib import Path
from typing import NoReturn, Optional

import typer

from permalink_monitor.adapters.github import (
    GitHubClient,
    GitHubEventSource,
    GitHubPublisher,
    GitHubRefResolver,
)
from permalink_monitor.adapters.report import TextReportGenerator
from permalink_monitor.config import Settings, get_settings
from permalink_monitor.core import (
    CorrectionAssembler,
    EventFilter,
    EventKind,
    LinkClassifier,
    SeenEventsTracker,
)
from permalink_monitor.use_cases import Command, CorrectionService, MonitoringService


def fail(message: str) -> NoReturn:
    """Print an error and exit."""
    typer.echo(f"permalink-monitor: {message}", err=True)
    raise typer.Exit(code=1)


def parse_name_arg(arg: Optional[str]) -> list[str]:
    """Split a comma separated list, or read one name per line from a file."""
    if not arg:
        return []

    path = Path(arg)
    if path.exists():
        if not path.is_file():
            fail(f"not a file {arg}")
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            fail(f"error reading file {arg}: {e}")
        return [line.strip() for line in lines if line.strip()]

    return [name.strip() for name in arg.split(",") if name.strip()]


def parse_events_arg(arg: Optional[str]) -> list[EventKind]:
    names = parse_name_arg(arg)
    try:
        return [EventKind(name) for name in names]
    except ValueError:
        valid = ", ".join(kind.value for kind in EventKind)
        raise typer.BadParameter(f"events must be among: {valid}", param_hint="--events")


def build_services(
    command: Command, settings: Settings
) -> tuple[MonitoringService, CorrectionService]:
    """Wire adapters and services from settings."""
    client = GitHubClient(settings.github, settings.github_token)
    classifier = LinkClassifier(host=settings.links.host, default_branch=settings.links.default_branch)
    assembler = CorrectionAssembler(
        classifier,
        excerpt_radius=settings.links.excerpt_radius,
        ignore_files=settings.links.ignore_files,
    )
    seen_tracker = SeenEventsTracker(settings.db_dir)

    monitoring_service = MonitoringService(
        source=GitHubEventSource(client, per_page=settings.github.per_page),
        resolver=GitHubRefResolver(client),
        assembler=assembler,
        seen_tracker=seen_tracker,
    )
    correction_service = CorrectionService(
        report_generator=TextReportGenerator(),
        publisher=GitHubPublisher(client) if command != Command.PRINT else None,
        seen_tracker=seen_tracker,
    )
    return monitoring_service, correction_service


async def watch(command: Command, settings: Settings, options: EventFilter, once: bool) -> None:
    """Poll for events and handle each one until interrupted."""
    monitoring_service, correction_service = build_services(command, settings)
    last_pruned: Optional[date] = None

    while True:
        if last_pruned != date.today():
            monitoring_service.prune_history(settings.monitoring.retention_days)
            last_pruned = date.today()

        events = await monitoring_service.collect_corrections(options)
        for event in events:
            await correction_service.handle(command, event)

        if once:
            break

        await asyncio.sleep(settings.interval)


def main(
    command: Command = typer.Argument(..., help="print, correct or comment"),
    auth: Optional[str] = typer.Option(
        None, "--auth", "-a", help="GitHub API token, comments and edits are made as its user"
    ),
    db: Optional[Path] = typer.Option(None, "--db", "-d", help="Where to store processed events"),
    events: Optional[str] = typer.Option(None, "--events", "-e", help="Only process the named events"),
    interval: Optional[int] = typer.Option(None, "--interval", "-i", help="Seconds between polls"),
    once: bool = typer.Option(False, "--once", "-1", help="Poll once and exit"),
    repos: Optional[str] = typer.Option(
        None, "--repos", "-r", "--include-repos", help="Monitor these owner/repo names, or a file of them"
    ),
    exclude_repos: Optional[str] = typer.Option(None, "--exclude-repos", help="Skip these owner/repo names"),
    users: Optional[str] = typer.Option(
        None, "--users", "-u", "--include-users", help="Monitor repositories owned by these users"
    ),
    exclude_users: Optional[str] = typer.Option(None, "--exclude-users", help="Skip repositories owned by these users"),
    config: Path = typer.Option(Path("config.yaml"), "--config", help="YAML configuration file"),
) -> None:
    """Find GitHub links to branches and replace them with permanent links."""
    settings = get_settings(config)

    if auth:
        settings.github_token = auth
    if command != Command.PRINT and not settings.github_token:
        fail(f"use of the '{command.value}' command requires a token")

    if interval is not None:
        if interval < 0:
            fail("interval must be >= 0")
        settings.monitoring.interval = interval
    if db is not None:
        settings.paths.db_dir = db

    options = settings.event_filter()
    if events:
        options.kinds = parse_events_arg(events)
    if repos:
        options.include_repos = parse_name_arg(repos)
    if exclude_repos:
        options.exclude_repos = parse_name_arg(exclude_repos)
    if users:
        options.include_users = parse_name_arg(users)
    if exclude_users:
        options.exclude_users = parse_name_arg(exclude_users)

    try:
        asyncio.run(watch(command, settings, options, once))
    except KeyboardInterrupt:
        print("\nStopped")


def app() -> None:
    """CLI entry point."""
    typer.run(main)


if __name__ == "__main__":
    app()
