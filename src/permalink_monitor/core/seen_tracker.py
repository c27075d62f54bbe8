"""Tracker for already processed events to avoid correcting them twice."""

import re
from datetime import date
from pathlib import Path
from typing import Optional

import yaml

from permalink_monitor.core.entities import Event, EventKind


class SeenEventsTracker:
    """Track processed events as individual YAML artifacts."""

    def __init__(self, storage_dir: Path) -> None:
        self.storage_dir = storage_dir
        self._ensure_structure()

    def _ensure_structure(self) -> None:
        """Create directory structure for artifacts."""
        if not self.storage_dir.exists():
            self.storage_dir.mkdir(parents=True, exist_ok=True)

            # One subdirectory per event kind
            for kind in EventKind:
                (self.storage_dir / kind.value).mkdir(exist_ok=True)

    def is_seen(self, event: Event) -> bool:
        """Check if event was already processed."""
        return self._get_artifact_path(event).exists()

    def mark_seen(self, event: Event, action: Optional[str] = None) -> None:
        """Mark event as processed by saving an artifact."""
        artifact_path = self._get_artifact_path(event)
        artifact_path.parent.mkdir(parents=True, exist_ok=True)

        artifact = {
            "event_id": event.event_id,
            "kind": event.kind.value,
            "repo": event.repo,
            "number": event.number,
            "actor": event.actor,
            "created_at": event.created_at.isoformat(),
            "date_seen": date.today().isoformat(),
            "action": action,
            "corrections": [
                {"original": str(c.original), "replacement": str(c.replacement)}
                for c in event.corrections
            ],
            "failures": [
                {"href": f.href, "kind": f.kind.value, "reason": f.reason}
                for f in event.failures
            ],
        }

        with open(artifact_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(artifact, f, allow_unicode=True, default_flow_style=False, sort_keys=False)

    def filter_unseen(self, events: list[Event]) -> tuple[list[Event], int]:
        """Filter out already processed events.

        Returns:
            Tuple of (unseen_events, filtered_count)
        """
        unseen = []
        filtered_count = 0

        for event in events:
            if self.is_seen(event):
                filtered_count += 1
            else:
                unseen.append(event)

        return unseen, filtered_count

    def _get_artifact_path(self, event: Event) -> Path:
        """Get path for artifact file."""
        safe_id = re.sub(r"[^\w-]", "_", event.event_id)
        return self.storage_dir / event.kind.value / f"{safe_id}.yaml"

    def get_stats(self) -> dict:
        """Get statistics about processed events."""
        kinds = {}
        total = 0

        for kind_dir in self.storage_dir.iterdir():
            if kind_dir.is_dir():
                count = len(list(kind_dir.glob("*.yaml")))
                kinds[kind_dir.name] = count
                total += count

        return {
            "total_seen": total,
            "by_kind": kinds,
        }

    def prune_old(self, days: int = 90) -> int:
        """Remove artifacts older than N days.

        Returns:
            Number of artifacts removed
        """
        today = date.today()
        removed = 0

        for kind_dir in self.storage_dir.iterdir():
            if not kind_dir.is_dir():
                continue

            for artifact_path in kind_dir.glob("*.yaml"):
                try:
                    with open(artifact_path, "r", encoding="utf-8") as f:
                        data = yaml.safe_load(f) or {}
                    date_seen = date.fromisoformat(data["date_seen"])
                except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError) as e:
                    print(f"⚠️  Skipping unreadable artifact {artifact_path}: {e}")
                    continue

                if (today - date_seen).days > days:
                    artifact_path.unlink()
                    removed += 1

        return removed
