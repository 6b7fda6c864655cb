"""
One organize pass: scan the root, resolve every file, move the matches.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from file_sorter.file_access.mover import Mover, MoveOutcome, SkipReason
from file_sorter.file_access.scanner import Scanner
from file_sorter.utils.error_handler import categorize_error
from .resolver import Resolver
from .rules import RuleSet

logger = logging.getLogger(__name__)


class RunReport:
    """Outcomes of a single organize pass."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self.outcomes: List[MoveOutcome] = []
        self.started_at = datetime.now()
        self.finished_at: Optional[datetime] = None
        self.cancelled = False

    def add(self, outcome: MoveOutcome):
        self.outcomes.append(outcome)

    def finish(self, cancelled: bool = False):
        self.finished_at = datetime.now()
        self.cancelled = cancelled

    @property
    def moved(self) -> List[MoveOutcome]:
        return [o for o in self.outcomes if o.is_moved]

    @property
    def skipped(self) -> List[MoveOutcome]:
        return [o for o in self.outcomes if o.is_skipped]

    @property
    def failed(self) -> List[MoveOutcome]:
        return [o for o in self.outcomes if o.is_failed]

    @property
    def moved_count(self) -> int:
        return len(self.moved)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def duration(self) -> float:
        end = self.finished_at or datetime.now()
        return (end - self.started_at).total_seconds()

    def get_summary(self) -> Dict[str, Any]:
        return {
            "root": str(self.root),
            "total": len(self.outcomes),
            "moved": self.moved_count,
            "skipped": self.skipped_count,
            "failed": self.failed_count,
            "cancelled": self.cancelled,
            "duration_seconds": round(self.duration, 3),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.get_summary(),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


class OrganizeRun:
    """Scanner -> Resolver -> Mover, one file at a time."""

    def __init__(
        self,
        scanner: Optional[Scanner] = None,
        resolver: Optional[Resolver] = None,
        mover: Optional[Mover] = None,
    ):
        self.scanner = scanner or Scanner()
        self.resolver = resolver or Resolver()
        self.mover = mover or Mover()

    def run(
        self,
        root: Path,
        rules: RuleSet,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> RunReport:
        """Organize ``root`` according to ``rules``.

        Args:
            root: Directory to organize
            rules: Rules for this pass; not modified
            should_stop: Checked before each file; a true result ends the pass early

        Returns:
            RunReport with one outcome per file handled

        Raises:
            RootDirectoryError: If root cannot be enumerated
        """
        root = Path(root)
        report = RunReport(root)
        candidates = self.scanner.scan(root, rules)

        logger.info(f"Organizing {root} with {len(rules)} rules")

        cancelled = False
        for candidate in candidates:
            if should_stop is not None and should_stop():
                logger.info("Stop requested, ending organize pass early")
                cancelled = True
                break

            try:
                destination = self.resolver.resolve(candidate, rules)
                if destination is None:
                    outcome = MoveOutcome.skipped(candidate.path, SkipReason.NO_RULE_MATCHED)
                else:
                    outcome = self.mover.move(candidate, destination, root)
            except Exception as e:
                logger.error(f"Error organizing file {candidate.path}: {e}")
                outcome = MoveOutcome.failed(candidate.path, categorize_error(e), str(e))

            report.add(outcome)

        report.finish(cancelled=cancelled)
        logger.info(
            f"Organize pass complete: {report.moved_count} moved, "
            f"{report.skipped_count} skipped, {report.failed_count} failed"
        )
        return report
