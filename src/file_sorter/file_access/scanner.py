import os
import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Set

from file_sorter.utils.error_handler import RootDirectoryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateFile:
    """Snapshot of a file taken at scan time."""

    path: Path
    name: str
    extension: str

    @classmethod
    def from_path(cls, path: Path) -> "CandidateFile":
        path = Path(path)
        return cls(path=path, name=path.name, extension=path.suffix)


class Scanner:
    """Enumerates the files of a directory that are eligible for sorting."""

    def __init__(
        self,
        recursive: bool = False,
        excluded_files: Iterable[Path] = (),
    ):
        """Initialize the scanner.

        Args:
            recursive: Whether to descend into subdirectories
            excluded_files: Files never offered for sorting (rule file, script file)
        """
        self.recursive = recursive
        self.excluded_files: Set[Path] = {self._resolve(p) for p in excluded_files}

    def scan(self, root: Path, rules) -> Iterator[CandidateFile]:
        """Return a lazy sequence of candidate files under ``root``.

        Args:
            root: Directory to scan
            rules: RuleSet whose destination folders are skipped

        Returns:
            Iterator of CandidateFile objects

        Raises:
            RootDirectoryError: If root is missing or cannot be listed
        """
        root = Path(root)
        if not root.exists():
            raise RootDirectoryError(f"Directory does not exist: {root}")
        if not root.is_dir():
            raise RootDirectoryError(f"Path is not a directory: {root}")

        try:
            top_level = os.scandir(root)
        except OSError as e:
            raise RootDirectoryError(f"Cannot list directory {root}: {e}") from e

        excluded_dirs = set(rules.destinations())
        logger.debug(
            f"Scanning {root} (recursive={self.recursive}, "
            f"excluded folders={sorted(excluded_dirs)})"
        )
        return self._iter_files(top_level, excluded_dirs)

    def _iter_files(self, top_level, excluded_dirs: Set[str]) -> Iterator[CandidateFile]:
        pending = []

        with top_level:
            for entry in top_level:
                candidate = self._check_entry(entry)
                if candidate is not None:
                    yield candidate
                elif self.recursive and self._is_subdir(entry):
                    if entry.name in excluded_dirs:
                        logger.debug(f"Skipping destination folder: {entry.path}")
                    else:
                        pending.append(entry.path)

        while pending:
            directory = pending.pop(0)
            try:
                with os.scandir(directory) as entries:
                    for entry in entries:
                        candidate = self._check_entry(entry)
                        if candidate is not None:
                            yield candidate
                        elif self._is_subdir(entry):
                            pending.append(entry.path)
            except OSError as e:
                logger.warning(f"Cannot list {directory}, skipping: {e}")

    def _check_entry(self, entry: os.DirEntry) -> Optional[CandidateFile]:
        try:
            if not entry.is_file(follow_symlinks=False):
                return None
        except OSError:
            return None

        path = Path(entry.path)
        if self._resolve(path) in self.excluded_files:
            logger.debug(f"Skipping rule/script file: {path}")
            return None

        return CandidateFile.from_path(path)

    @staticmethod
    def _is_subdir(entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir(follow_symlinks=False)
        except OSError:
            return False

    @staticmethod
    def _resolve(path: Path) -> Path:
        return Path(os.path.abspath(os.path.realpath(path)))
