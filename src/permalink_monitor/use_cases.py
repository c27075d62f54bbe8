"""Business logic use cases."""

from enum import Enum
from typing import Optional, Union

from permalink_monitor.core import (
    CorrectionAssembler,
    Event,
    EventFilter,
    EventPublisher,
    EventSource,
    MarkupError,
    PermalinkMonitorError,
    RefResolver,
    ReportGenerator,
    ResolutionError,
    SeenEventsTracker,
    render_comment,
    render_corrected_body,
)

RefKey = tuple[str, str, str]


class Command(str, Enum):
    """What to do with an event that has non-permanent links."""

    PRINT = "print"
    CORRECT = "correct"
    COMMENT = "comment"


class ResolvedRefs:
    """Synchronous lookup over refs resolved ahead of time."""

    def __init__(self, resolved: dict[RefKey, Union[str, ResolutionError]]) -> None:
        self.resolved = resolved

    def __call__(self, owner: str, repo: str, ref: str) -> str:
        value = self.resolved.get((owner, repo, ref))
        if value is None:
            raise ResolutionError(owner, repo, ref, "ref was not looked up")
        if isinstance(value, ResolutionError):
            raise value
        return value


class MonitoringService:
    """Service for finding non-permanent links in recent activity."""

    def __init__(
        self,
        source: EventSource,
        resolver: RefResolver,
        assembler: CorrectionAssembler,
        seen_tracker: Optional[SeenEventsTracker] = None,
    ) -> None:
        self.source = source
        self.resolver = resolver
        self.assembler = assembler
        self.seen_tracker = seen_tracker

    async def collect_corrections(self, options: EventFilter) -> list[Event]:
        """Fetch new events and return those with links to correct.

        Events with nothing to correct are marked as seen right away.
        """
        name = getattr(self.source, "name", self.source.__class__.__name__)
        print(f"\n{getattr(self.source, 'emoji', '🔍')} Fetching: {name}")

        try:
            events = await self.source.fetch_events(options)
        except PermalinkMonitorError as e:
            print(f"  └─ ❌ Error: {e}")
            return []

        if self.seen_tracker:
            events, seen_count = self.seen_tracker.filter_unseen(events)
            if seen_count:
                stats = self.seen_tracker.get_stats()
                print(f"  └─ Already processed: {seen_count} (history: {stats['total_seen']})")

        # One lookup per ref per poll cycle
        resolved: dict[RefKey, Union[str, ResolutionError]] = {}
        results = []

        for event in events:
            # Markdown has no anchors, so wait for the HTML on a later poll
            if event.html_missing:
                print(f"  └─ ⚠️  {event.kind.value} #{event.number} in {event.repo}: no HTML body, retrying later")
                continue

            try:
                await self._resolve_links(event, resolved)
                self.assembler.correct(event, ResolvedRefs(resolved))
            except MarkupError as e:
                print(f"  └─ ⚠️  {event.kind.value} #{event.number} in {event.repo}: {e}")
                continue

            if event.corrections or event.failures:
                results.append(event)
            elif self.seen_tracker:
                self.seen_tracker.mark_seen(event)

        print(f"✓ Events with non-permanent links: {len(results)}")
        return results

    def prune_history(self, days: int) -> int:
        """Forget processed events seen more than ``days`` days ago."""
        if not self.seen_tracker:
            return 0

        removed = self.seen_tracker.prune_old(days)
        if removed:
            print(f"🧹 Pruned {removed} processed events older than {days} days")
        return removed

    async def _resolve_links(self, event: Event, resolved: dict[RefKey, Union[str, ResolutionError]]) -> None:
        """Resolve every ref linked from the event that is not cached yet."""
        for link in self.assembler.deep_links(event.html):
            key = (link.owner, link.repo, link.ref)
            if key in resolved:
                continue

            try:
                resolved[key] = await self.resolver.resolve(*key)
            except ResolutionError as e:
                print(f"  └─ ⚠️  {e}")
                resolved[key] = e


class CorrectionService:
    """Service for acting on events with non-permanent links."""

    def __init__(
        self,
        report_generator: ReportGenerator,
        publisher: Optional[EventPublisher] = None,
        seen_tracker: Optional[SeenEventsTracker] = None,
    ) -> None:
        self.report_generator = report_generator
        self.publisher = publisher
        self.seen_tracker = seen_tracker

    def print_event(self, event: Event) -> bool:
        """Print the event's corrections."""
        print(self.report_generator.generate(event))
        return True

    async def correct_event(self, event: Event) -> bool:
        """Edit the event, replacing each non-permanent link with its permanent version."""
        if not event.corrections:
            return False

        print(f"Correcting {event.kind.value} #{event.number} by {event.actor}")

        try:
            await self._require_publisher().apply_correction(event, render_corrected_body(event))
        except PermalinkMonitorError as e:
            print(f"⚠️  Correction failed: {e}")
            return False

        print("✓ Correction successful")
        return True

    async def comment_on_event(self, event: Event) -> Optional[int]:
        """Comment on the event with the permanent version of each link."""
        if not event.corrections:
            return None

        print(f"Commenting on {event.kind.value} #{event.number} by {event.actor}")

        try:
            comment_id = await self._require_publisher().post_comment(event, render_comment(event))
        except PermalinkMonitorError as e:
            print(f"⚠️  Comment failed: {e}")
            return None

        print(f"✓ Comment successful, id={comment_id}")
        return comment_id

    async def handle(self, command: Command, event: Event) -> bool:
        """Run ``command`` on ``event`` and remember it when it succeeds."""
        if command == Command.PRINT:
            done = self.print_event(event)
        elif command == Command.CORRECT:
            done = await self.correct_event(event)
        else:
            done = await self.comment_on_event(event) is not None

        if done and self.seen_tracker:
            self.seen_tracker.mark_seen(event, action=command.value)

        return done

    def _require_publisher(self) -> EventPublisher:
        if self.publisher is None:
            raise RuntimeError("A publisher is required to correct or comment on events")
        return self.publisher
