"""
Tests for a complete organize pass.
"""

import shutil
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from file_sorter.file_access.mover import Mover, OutcomeStatus, SkipReason
from file_sorter.file_access.scanner import Scanner
from file_sorter.organization_logic.organize_run import OrganizeRun, RunReport
from file_sorter.organization_logic.resolver import Resolver
from file_sorter.organization_logic.rules import Rule, RuleSet
from file_sorter.utils.error_handler import ErrorKind, RootDirectoryError


class TestOrganizeRun:
    """Test the OrganizeRun class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.rules = RuleSet.from_mapping({".txt": "TextFiles", ".jpg": "Images"})
        self.organizer = OrganizeRun()

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def _create(self, *names: str, content: str = "data"):
        for name in names:
            path = self.temp_dir / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)

    def _by_name(self, report: RunReport):
        return {o.source.name: o for o in report.outcomes}

    def test_sorts_by_extension(self):
        """Test matching files are moved and unknown files are skipped."""
        self._create("a.txt", "b.jpg", "c.unknown")

        report = self.organizer.run(self.temp_dir, self.rules)
        outcomes = self._by_name(report)

        assert outcomes["a.txt"].target == self.temp_dir / "TextFiles" / "a.txt"
        assert outcomes["b.jpg"].target == self.temp_dir / "Images" / "b.jpg"
        assert outcomes["c.unknown"].status is OutcomeStatus.SKIPPED
        assert outcomes["c.unknown"].skip_reason is SkipReason.NO_RULE_MATCHED
        assert (self.temp_dir / "c.unknown").exists()
        assert report.moved_count == 2
        assert report.skipped_count == 1
        assert report.failed_count == 0

    def test_name_clash_with_existing_file(self):
        """Test an incoming file does not overwrite an existing one."""
        self._create("TextFiles/a.txt", content="old")
        self._create("a.txt", content="new")

        report = self.organizer.run(self.temp_dir, self.rules)

        assert report.moved[0].target == self.temp_dir / "TextFiles" / "a (1).txt"
        assert (self.temp_dir / "TextFiles" / "a.txt").read_text() == "old"
        assert (self.temp_dir / "TextFiles" / "a (1).txt").read_text() == "new"

    def test_same_name_from_different_folders(self):
        """Test two files with one name sent to one folder both survive."""
        self._create("inbox/a.txt", content="first")
        self._create("outbox/a.txt", content="second")

        organizer = OrganizeRun(scanner=Scanner(recursive=True))
        report = organizer.run(self.temp_dir, self.rules)

        targets = sorted(o.target.name for o in report.moved)
        assert targets == ["a (1).txt", "a.txt"]
        contents = sorted(
            (self.temp_dir / "TextFiles" / name).read_text() for name in targets
        )
        assert contents == ["first", "second"]

    def test_script_hook_rule(self):
        """Test a script hook routes files without extension rules."""
        self._create("app.log", "notes.txt")

        def hook(path):
            return "Logs" if path.endswith(".log") else None

        rules = RuleSet([Rule.for_script(hook)])
        report = self.organizer.run(self.temp_dir, rules)
        outcomes = self._by_name(report)

        assert outcomes["app.log"].target == self.temp_dir / "Logs" / "app.log"
        assert outcomes["notes.txt"].skip_reason is SkipReason.NO_RULE_MATCHED

    def test_second_run_moves_nothing(self):
        """Test re-running on an organized directory changes nothing."""
        self._create("a.txt", "b.jpg", "c.unknown")
        self.organizer.run(self.temp_dir, self.rules)

        second = self.organizer.run(self.temp_dir, self.rules)

        assert second.moved_count == 0
        assert second.failed_count == 0
        assert len(second.outcomes) == second.skipped_count == 1

    def test_second_recursive_run_with_script_moves_nothing(self):
        """Test files already in a script destination are left in place."""
        self._create("app.log")
        rules = RuleSet([Rule.for_script(lambda p: "Logs" if p.endswith(".log") else None)])
        organizer = OrganizeRun(scanner=Scanner(recursive=True))

        organizer.run(self.temp_dir, rules)
        second = organizer.run(self.temp_dir, rules)

        assert second.moved_count == 0
        assert second.skipped[0].skip_reason is SkipReason.ALREADY_IN_PLACE
        assert (self.temp_dir / "Logs" / "app.log").exists()

    def test_rules_not_modified(self):
        """Test a pass leaves the RuleSet untouched."""
        self._create("a.txt")
        before = list(self.rules)

        self.organizer.run(self.temp_dir, self.rules)

        assert list(self.rules) == before

    def test_per_file_failure_does_not_stop_run(self):
        """Test one failing file is recorded and the rest still move."""
        self._create("TextFiles", content="blocking file")
        self._create("a.txt", "b.jpg")

        report = self.organizer.run(self.temp_dir, self.rules)
        outcomes = self._by_name(report)

        assert outcomes["a.txt"].error_kind is ErrorKind.DESTINATION_CONFLICT
        assert outcomes["b.jpg"].is_moved

    def test_unexpected_error_recorded_as_failure(self):
        """Test an exception from a collaborator becomes a failed outcome."""
        self._create("a.txt")
        mover = Mock(spec=Mover)
        mover.move.side_effect = OSError("disk on fire")

        report = OrganizeRun(mover=mover).run(self.temp_dir, self.rules)

        assert report.failed_count == 1
        assert report.failed[0].error_kind is ErrorKind.IO_ERROR
        assert "disk on fire" in report.failed[0].message

    def test_missing_root_aborts(self):
        """Test an unusable root aborts the pass."""
        with pytest.raises(RootDirectoryError):
            self.organizer.run(self.temp_dir / "missing", self.rules)

    def test_stop_request_ends_pass_early(self):
        """Test cancellation is checked before each file."""
        self._create("a.txt", "b.txt", "c.txt")
        calls = []

        def should_stop():
            calls.append(True)
            return len(calls) > 1

        report = self.organizer.run(self.temp_dir, self.rules, should_stop=should_stop)

        assert report.cancelled
        assert len(report.outcomes) == 1
        assert report.moved_count == 1
        remaining = [p.name for p in self.temp_dir.iterdir() if p.is_file()]
        assert len(remaining) == 2

    def test_custom_resolver(self):
        """Test the resolver collaborator is used for every file."""
        self._create("a.txt")
        resolver = Mock(spec=Resolver)
        resolver.resolve.return_value = None

        report = OrganizeRun(resolver=resolver).run(self.temp_dir, self.rules)

        resolver.resolve.assert_called_once()
        assert report.skipped_count == 1


class TestRunReport:
    """Test RunReport bookkeeping."""

    def test_summary(self):
        """Test an empty report summary."""
        report = RunReport(Path("/tmp/root"))
        report.finish()

        summary = report.get_summary()

        assert summary["total"] == 0
        assert summary["cancelled"] is False
        assert summary["duration_seconds"] >= 0
        assert report.to_dict()["outcomes"] == []
