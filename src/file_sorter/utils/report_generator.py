"""
Render organize-run reports as text and JSON.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class ReportGenerator:
    """Format a RunReport for people and for machines."""

    def __init__(self, report):
        """
        Args:
            report: RunReport produced by an organize pass
        """
        self.report = report

    def generate_summary_line(self) -> str:
        summary = self.report.get_summary()
        line = (
            f"{summary['root']}: {summary['moved']} moved, "
            f"{summary['skipped']} skipped, {summary['failed']} failed "
            f"in {summary['duration_seconds']:.2f}s"
        )
        if summary["cancelled"]:
            line += " (cancelled)"
        return line

    def generate_summary_report(self) -> str:
        """Generate a text report listing every outcome by status."""
        report = self.report
        lines = []
        lines.append("File Sorter Report")
        lines.append("=" * 30)
        lines.append(f"Directory: {report.root}")
        lines.append(f"Started: {report.started_at.isoformat()}")
        lines.append("")

        lines.append("Summary:")
        lines.append(f"  Moved: {report.moved_count}")
        lines.append(f"  Skipped: {report.skipped_count}")
        lines.append(f"  Failed: {report.failed_count}")
        if report.cancelled:
            lines.append("  Run was cancelled before all files were handled")

        if report.moved:
            lines.append("")
            lines.append("Moved:")
            for outcome in report.moved:
                lines.append(f"  {outcome.source.name} -> {outcome.target}")
                if outcome.warning:
                    lines.append(f"    Warning: {outcome.warning}")

        if report.skipped:
            lines.append("")
            lines.append("Skipped:")
            for outcome in report.skipped:
                lines.append(f"  {outcome.source.name} ({outcome.skip_reason.value})")

        if report.failed:
            lines.append("")
            lines.append("Failed:")
            for outcome in report.failed:
                lines.append(f"  {outcome.source.name} ({outcome.error_kind.value})")
                if outcome.message:
                    lines.append(f"    Error: {outcome.message}")

        return "\n".join(lines)

    def save_json(self, output_path: Path):
        """Write the full report as JSON."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.report.to_dict(), f, indent=2)

        logger.info(f"Report saved to {output_path}")
