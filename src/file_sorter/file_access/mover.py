"""
File relocation with deterministic collision handling.
"""

import os
import errno
import shutil
import logging
from pathlib import Path
from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, Optional

from file_sorter.file_access.scanner import CandidateFile
from file_sorter.utils.error_handler import (
    CollisionExhaustedError,
    DestinationConflictError,
    ErrorKind,
    categorize_error,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_COLLISION_PROBES = 1000


class OutcomeStatus(Enum):
    MOVED = "moved"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(Enum):
    NO_RULE_MATCHED = "no_rule_matched"
    ALREADY_IN_PLACE = "already_in_place"


@dataclass(frozen=True)
class MoveOutcome:
    """Result of handling one candidate file."""

    status: OutcomeStatus
    source: Path
    target: Optional[Path] = None
    skip_reason: Optional[SkipReason] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    warning: Optional[str] = None

    @classmethod
    def moved(cls, source: Path, target: Path, warning: Optional[str] = None) -> "MoveOutcome":
        return cls(OutcomeStatus.MOVED, source, target=target, warning=warning)

    @classmethod
    def skipped(cls, source: Path, reason: SkipReason) -> "MoveOutcome":
        return cls(OutcomeStatus.SKIPPED, source, skip_reason=reason)

    @classmethod
    def failed(cls, source: Path, kind: ErrorKind, message: str = "") -> "MoveOutcome":
        return cls(OutcomeStatus.FAILED, source, error_kind=kind, message=message)

    @property
    def is_moved(self) -> bool:
        return self.status is OutcomeStatus.MOVED

    @property
    def is_skipped(self) -> bool:
        return self.status is OutcomeStatus.SKIPPED

    @property
    def is_failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "source": str(self.source),
            "target": str(self.target) if self.target else None,
            "skip_reason": self.skip_reason.value if self.skip_reason else None,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "message": self.message,
            "warning": self.warning,
        }


class Mover:
    """Moves files into destination folders below a root directory."""

    def __init__(self, max_collision_probes: int = DEFAULT_MAX_COLLISION_PROBES):
        """Initialize the mover.

        Args:
            max_collision_probes: How many ``name (n).ext`` variants to try
                before giving up on a name collision
        """
        if max_collision_probes < 1:
            raise ValueError("max_collision_probes must be >= 1")
        self.max_collision_probes = max_collision_probes

    def move(self, candidate: CandidateFile, destination: str, root: Path) -> MoveOutcome:
        """Relocate a file into ``root/destination``.

        Args:
            candidate: File to move
            destination: Folder name below root
            root: Directory being organized

        Returns:
            MoveOutcome describing what happened; errors are captured, not raised
        """
        source = candidate.path
        target_dir = Path(root) / destination

        if self._same_directory(source.parent, target_dir):
            logger.debug(f"Already in place: {source}")
            return MoveOutcome.skipped(source, SkipReason.ALREADY_IN_PLACE)

        if not os.path.lexists(source):
            logger.warning(f"Source file not found: {source}")
            return MoveOutcome.failed(source, ErrorKind.NOT_FOUND, "Source file not found")

        try:
            self._ensure_directory(target_dir)
            target = self._free_target(target_dir, candidate.name)
        except (OSError, DestinationConflictError, CollisionExhaustedError) as e:
            return self._failure(source, e)

        if target.name != candidate.name:
            logger.info(f"Resolved conflict: {target_dir / candidate.name} -> {target}")

        return self._relocate(source, target)

    def _ensure_directory(self, directory: Path):
        # destination folders must be real directories below the root
        if directory.is_symlink():
            raise DestinationConflictError(f"Destination is a symbolic link: {directory}")

        if directory.exists() and not directory.is_dir():
            raise DestinationConflictError(f"Not a directory: {directory}")

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except FileExistsError as e:
            # something other than a directory appeared at that path
            raise DestinationConflictError(f"Not a directory: {directory}") from e

    def _free_target(self, directory: Path, name: str) -> Path:
        target = directory / name
        if not os.path.lexists(target):
            return target

        stem, suffix = Path(name).stem, Path(name).suffix
        for counter in range(1, self.max_collision_probes + 1):
            candidate = directory / f"{stem} ({counter}){suffix}"
            if not os.path.lexists(candidate):
                return candidate

        raise CollisionExhaustedError(
            f"No free name for {name} in {directory} after "
            f"{self.max_collision_probes} attempts"
        )

    def _relocate(self, source: Path, target: Path) -> MoveOutcome:
        try:
            # rename replaces an existing target; only this pass writes into
            # the destination folders, so the name probed above is still free
            os.rename(source, target)
        except OSError as e:
            if e.errno != errno.EXDEV:
                return self._failure(source, e)
            return self._copy_then_delete(source, target)

        logger.info(f"Moved: {source} -> {target}")
        return MoveOutcome.moved(source, target)

    def _copy_then_delete(self, source: Path, target: Path) -> MoveOutcome:
        logger.debug(f"Cross-device move, copying {source} -> {target}")
        created = False
        try:
            with open(source, "rb") as src:
                # exclusive create, never overwrite a file that appeared meanwhile
                with open(target, "xb") as dst:
                    created = True
                    shutil.copyfileobj(src, dst)
            shutil.copystat(source, target)
        except OSError as e:
            if created:
                try:
                    target.unlink()
                except OSError as cleanup_error:
                    logger.error(f"Failed to remove partial copy {target}: {cleanup_error}")
            return self._failure(source, e)

        try:
            source.unlink()
        except OSError as e:
            warning = f"Copied to {target} but could not delete source: {e}"
            logger.warning(warning)
            return MoveOutcome.moved(source, target, warning=warning)

        logger.info(f"Moved: {source} -> {target}")
        return MoveOutcome.moved(source, target)

    def _failure(self, source: Path, error: Exception) -> MoveOutcome:
        kind = categorize_error(error)
        logger.error(f"Failed to move {source}: {error}")
        return MoveOutcome.failed(source, kind, str(error))

    @staticmethod
    def _same_directory(a: Path, b: Path) -> bool:
        try:
            return os.path.samefile(a, b)
        except OSError:
            return False
