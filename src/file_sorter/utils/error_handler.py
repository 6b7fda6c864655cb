"""
Error taxonomy and error bookkeeping for the file sorter.
Per-file failures are categorised into an ErrorKind and recorded on the
file's outcome; only a failure to list the root directory aborts a run.
"""

import errno
import logging
import traceback
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    """Categorization of per-file failures."""

    NOT_FOUND = "not_found"
    DESTINATION_CONFLICT = "destination_conflict"
    COLLISION_EXHAUSTED = "collision_exhausted"
    PERMISSION_DENIED = "permission_denied"
    SCRIPT_ERROR = "script_error"
    IO_ERROR = "io_error"


class FileSorterError(Exception):
    """Base error for the project."""


class ConfigurationError(FileSorterError):
    """Raised when the configuration fails validation."""


class InvalidRuleError(FileSorterError):
    """Raised when a rule is constructed with an unusable matcher or destination."""


class RuleFileError(FileSorterError):
    """Raised when a rule file cannot be read or has the wrong shape."""


class ScriptError(FileSorterError):
    """Raised when a script hook raises or returns something unusable."""


class RootDirectoryError(FileSorterError):
    """Raised when the directory to organize is missing or cannot be listed."""


class DestinationConflictError(FileSorterError):
    """Raised when a non-directory occupies a destination folder path."""


class CollisionExhaustedError(FileSorterError):
    """Raised when no free name is found within the probe limit."""


def categorize_error(error: Exception) -> ErrorKind:
    """Map an exception onto the error taxonomy."""
    if isinstance(error, DestinationConflictError):
        return ErrorKind.DESTINATION_CONFLICT
    elif isinstance(error, CollisionExhaustedError):
        return ErrorKind.COLLISION_EXHAUSTED
    elif isinstance(error, ScriptError):
        return ErrorKind.SCRIPT_ERROR
    elif isinstance(error, FileNotFoundError):
        return ErrorKind.NOT_FOUND
    elif isinstance(error, PermissionError):
        return ErrorKind.PERMISSION_DENIED
    elif isinstance(error, OSError):
        if error.errno in (errno.EACCES, errno.EPERM):
            return ErrorKind.PERMISSION_DENIED
        if error.errno == errno.ENOENT:
            return ErrorKind.NOT_FOUND
        return ErrorKind.IO_ERROR
    else:
        return ErrorKind.IO_ERROR


class ErrorRecord:
    """Record of an error occurrence."""

    def __init__(self, error: Exception, context: str, kind: ErrorKind):
        self.error = error
        self.context = context
        self.kind = kind
        self.timestamp = datetime.now()
        self.traceback = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "error": str(self.error),
            "context": self.context,
            "kind": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
            "traceback": self.traceback,
        }


class ErrorHandler:
    """Keep a history of errors and per-kind counts."""

    def __init__(self, max_history: int = 100):
        """
        Initialize error handler.

        Args:
            max_history: Number of error records kept in memory
        """
        self.max_history = max_history
        self.error_history: List[ErrorRecord] = []
        self.error_counts: Dict[ErrorKind, int] = {kind: 0 for kind in ErrorKind}

    def handle_error(self, error: Exception, context: str) -> ErrorKind:
        """
        Categorize, log and record an error.

        Args:
            error: The exception to handle
            context: Context describing where the error occurred

        Returns:
            The ErrorKind the error was filed under
        """
        kind = categorize_error(error)
        record = ErrorRecord(error, context, kind)

        self.error_history.append(record)
        if len(self.error_history) > self.max_history:
            self.error_history = self.error_history[-self.max_history :]
        self.error_counts[kind] += 1

        logger.error(f"Error in {context}: {error}", extra={"error_kind": kind.value})
        return kind

    def get_error_statistics(self) -> Dict[str, Any]:
        """Get statistics about errors encountered."""
        return {
            "total_errors": sum(self.error_counts.values()),
            "error_counts_by_kind": {
                kind.value: count for kind, count in self.error_counts.items()
            },
            "recent_errors": [record.to_dict() for record in self.error_history[-10:]],
        }
