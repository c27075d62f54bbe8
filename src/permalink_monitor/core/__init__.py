"""Core domain layer."""

from permalink_monitor.core.corrections import (
    CorrectionAssembler,
    render_comment,
    render_corrected_body,
)
from permalink_monitor.core.entities import (
    Correction,
    CorrectionResult,
    Event,
    EventFilter,
    EventKind,
    FailureKind,
    LinkFailure,
)
from permalink_monitor.core.errors import (
    GitHubAPIError,
    MalformedLinkError,
    MarkupError,
    PermalinkMonitorError,
    RenderError,
    ResolutionError,
)
from permalink_monitor.core.interfaces import EventPublisher, EventSource, RefResolver, ReportGenerator
from permalink_monitor.core.links import LinkClassifier, LinkReference
from permalink_monitor.core.seen_tracker import SeenEventsTracker

__all__ = [
    "LinkClassifier",
    "LinkReference",
    "Correction",
    "CorrectionResult",
    "CorrectionAssembler",
    "Event",
    "EventFilter",
    "EventKind",
    "FailureKind",
    "LinkFailure",
    "EventSource",
    "RefResolver",
    "EventPublisher",
    "ReportGenerator",
    "SeenEventsTracker",
    "PermalinkMonitorError",
    "MalformedLinkError",
    "MarkupError",
    "RenderError",
    "ResolutionError",
    "GitHubAPIError",
    "render_comment",
    "render_corrected_body",
]
