"""
Tests for the report generator.
"""

import json
from pathlib import Path

from file_sorter.file_access.mover import MoveOutcome, SkipReason
from file_sorter.organization_logic.organize_run import RunReport
from file_sorter.utils.error_handler import ErrorKind
from file_sorter.utils.report_generator import ReportGenerator


def build_report(cancelled=False) -> RunReport:
    root = Path("/data/inbox")
    report = RunReport(root)
    report.add(MoveOutcome.moved(root / "a.txt", root / "TextFiles" / "a.txt"))
    report.add(
        MoveOutcome.moved(
            root / "b.jpg", root / "Images" / "b.jpg", warning="could not delete source"
        )
    )
    report.add(MoveOutcome.skipped(root / "c.unknown", SkipReason.NO_RULE_MATCHED))
    report.add(MoveOutcome.failed(root / "d.txt", ErrorKind.PERMISSION_DENIED, "denied"))
    report.finish(cancelled=cancelled)
    return report


class TestReportGenerator:
    """Test the ReportGenerator class."""

    def test_summary_line(self):
        """Test the one-line summary."""
        line = ReportGenerator(build_report()).generate_summary_line()

        assert line.startswith(f"{Path('/data/inbox')}: 2 moved, 1 skipped, 1 failed in ")
        assert "(cancelled)" not in line

    def test_summary_line_cancelled(self):
        """Test cancelled runs are flagged."""
        line = ReportGenerator(build_report(cancelled=True)).generate_summary_line()

        assert line.endswith("(cancelled)")

    def test_summary_report_sections(self):
        """Test the text report lists every outcome."""
        text = ReportGenerator(build_report()).generate_summary_report()

        assert text.startswith("File Sorter Report")
        assert "  Moved: 2" in text
        assert "Warning: could not delete source" in text
        assert "c.unknown (no_rule_matched)" in text
        assert "d.txt (permission_denied)" in text
        assert "Error: denied" in text

    def test_save_json(self, tmp_path):
        """Test the JSON report contents."""
        output = tmp_path / "reports" / "run.json"

        ReportGenerator(build_report()).save_json(output)

        with open(output) as f:
            data = json.load(f)

        assert data["summary"]["moved"] == 2
        assert data["summary"]["failed"] == 1
        assert len(data["outcomes"]) == 4
        assert data["outcomes"][2]["skip_reason"] == "no_rule_matched"
