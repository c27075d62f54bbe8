"""Assemble corrections for the non-permanent links in an event body."""

from collections.abc import Callable

from bs4.element import Tag

from permalink_monitor.core.entities import (
    Correction,
    CorrectionResult,
    Event,
    FailureKind,
    LinkFailure,
)
from permalink_monitor.core.errors import MalformedLinkError, ResolutionError
from permalink_monitor.core.links import LinkClassifier, LinkReference
from permalink_monitor.core.markup import excerpt_html, iter_anchors, parse_fragment

DEFAULT_EXCERPT_RADIUS = 50

DEFAULT_IGNORE_FILES = (
    "AUTHORS", "AUTHORS.txt", "AUTHORS.md", "AUTHORS.markdown",
    "CONTRIBUTING", "CONTRIBUTING.txt", "CONTRIBUTING.md", "CONTRIBUTING.markdown",
    "LICENSE", "LICENSE.txt",
    "ISSUE_TEMPLATE", "ISSUE_TEMPLATE.md", "ISSUE_TEMPLATE.markdown",
    "PULL_REQUEST_TEMPLATE", "PULL_REQUEST_TEMPLATE.md", "PULL_REQUEST_TEMPLATE.markdown",
)

HELP_URL = "https://docs.github.com/en/repositories/working-with-files/using-files/getting-permanent-links-to-files"
COMMENT_INTRO = "Annotating the GitHub links used by @{actor} with [permanent versions](" + HELP_URL + ").\n"
CORRECTION_FOOTER = "*GitHub links corrected by permalink-monitor.*"

# (owner, repo, ref) -> commit SHA, raising ResolutionError
Resolver = Callable[[str, str, str], str]


class CorrectionAssembler:
    """Find non-permanent links in HTML and pair them with permanent ones."""

    def __init__(
        self,
        classifier: LinkClassifier,
        excerpt_radius: int = DEFAULT_EXCERPT_RADIUS,
        ignore_files: tuple[str, ...] | list[str] = DEFAULT_IGNORE_FILES,
    ) -> None:
        if excerpt_radius < 0:
            raise ValueError(f"Excerpt radius must be >= 0, got {excerpt_radius}")

        self.classifier = classifier
        self.excerpt_radius = excerpt_radius
        self.ignore_files = frozenset(ignore_files)

    def _needs_correction(self, link: LinkReference | None) -> bool:
        if link is None or link.is_permanent:
            return False
        return link.file_name not in self.ignore_files

    def deep_links(self, html: str) -> list[LinkReference]:
        """List the links in ``html`` that would be corrected, in document order.

        Malformed hrefs are skipped here; ``assemble`` reports them.
        """
        links = []
        for anchor in iter_anchors(parse_fragment(html)):
            href = anchor.get("href")
            if not href:
                continue

            try:
                link = self.classifier.classify(href)
            except MalformedLinkError:
                continue

            if self._needs_correction(link):
                links.append(link)

        return links

    def assemble(self, html: str, resolve: Resolver) -> CorrectionResult:
        """Build the corrections for every non-permanent link in ``html``.

        A link that cannot be parsed or resolved is recorded in
        ``CorrectionResult.failures`` and the rest of the body is still
        processed.

        Raises:
            MarkupError: If ``html`` cannot be parsed at all.
        """
        result = CorrectionResult()

        for anchor in iter_anchors(parse_fragment(html)):
            correction = self._correct_anchor(anchor, resolve, result)
            if correction is not None:
                result.corrections.append(correction)

        return result

    def _correct_anchor(
        self, anchor: Tag, resolve: Resolver, result: CorrectionResult
    ) -> Correction | None:
        href = anchor.get("href")
        if not href:
            return None

        try:
            link = self.classifier.classify(href)
        except MalformedLinkError as e:
            result.failures.append(LinkFailure(href=href, reason=str(e), kind=FailureKind.MALFORMED))
            return None

        if not self._needs_correction(link):
            return None

        try:
            sha = resolve(link.owner, link.repo, link.ref)
        except ResolutionError as e:
            result.failures.append(LinkFailure(href=href, reason=str(e), kind=FailureKind.UNRESOLVED))
            return None

        return Correction(
            original=link,
            replacement=link.with_ref(sha),
            context=excerpt_html(anchor, self.excerpt_radius),
        )

    def correct(self, event: Event, resolve: Resolver) -> Event:
        """Fill ``event.corrections`` and ``event.failures`` from its body."""
        result = self.assemble(event.html, resolve)
        event.corrections = result.corrections
        event.failures = result.failures
        return event


def render_corrected_body(event: Event) -> str:
    """Return the event body with every corrected link replaced."""
    body = event.body
    for correction in event.corrections:
        body = body.replace(str(correction.original), str(correction.replacement))

    return body + "\n\n" + CORRECTION_FOOTER


def render_comment(event: Event) -> str:
    """Return a comment quoting each link's context and its permanent version."""
    comment = COMMENT_INTRO.format(actor=event.actor)
    for correction in event.corrections:
        comment += f"> {correction.context}\n\n{correction.replacement}\n"

    return comment
