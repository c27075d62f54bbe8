"""Core interfaces for adapters."""

from abc import ABC, abstractmethod

from permalink_monitor.core.entities import Event, EventFilter


class EventSource(ABC):
    """Interface for fetching activity from the hosting platform."""

    @abstractmethod
    async def fetch_events(self, options: EventFilter) -> list[Event]:
        """Fetch recent events matching ``options``."""
        pass


class RefResolver(ABC):
    """Interface for mapping a branch or tag to a commit."""

    @abstractmethod
    async def resolve(self, owner: str, repo: str, ref: str) -> str:
        """Return the commit SHA ``ref`` currently points at.

        Raises:
            ResolutionError: If the ref does not exist.
        """
        pass


class EventPublisher(ABC):
    """Interface for writing corrections back to the platform."""

    @abstractmethod
    async def apply_correction(self, event: Event, new_body: str) -> None:
        """Replace the body of the event's resource."""
        pass

    @abstractmethod
    async def post_comment(self, event: Event, comment_body: str) -> int:
        """Comment on the event's issue or pull request, returning the comment id."""
        pass


class ReportGenerator(ABC):
    """Interface for rendering an event's corrections for humans."""

    @abstractmethod
    def generate(self, event: Event) -> str:
        """Render the corrections of ``event``."""
        pass
