"""Plain text report of an event's corrections."""

from permalink_monitor.core import Correction, Event, ReportGenerator

RULE = "-" * 17


class TextReportGenerator(ReportGenerator):
    """Render corrections the way the ``print`` command shows them."""

    def generate(self, event: Event) -> str:
        """Generate the report for one event."""
        lines = [
            RULE,
            f"{'Event':>6}: {event.kind.value}",
            f"{'Number':>6}: {event.number}",
            f"{'Repo':>6}: {event.repo}",
            RULE,
        ]

        for i, correction in enumerate(event.corrections, 1):
            lines.extend(self._format_correction(i, correction))

        if event.failures:
            lines.append("Skipped links:")
            for failure in event.failures:
                lines.append(f"  - {failure.href} ({failure.kind.value}): {failure.reason}")
            lines.append("")

        return "\n".join(lines)

    def _format_correction(self, index: int, correction: Correction) -> list[str]:
        """Format a single correction."""
        return [
            f"{index:2d}. {'Current:':<11} {correction.original}",
            f"{'':2}  {'Corrected:':<11} {correction.replacement}",
            f"{'':2}  {'Context:':<11} {correction.context}",
            "",
        ]
