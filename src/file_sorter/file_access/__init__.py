"""
Filesystem access: scanning candidate files and moving them.
"""

from .scanner import CandidateFile, Scanner
from .mover import Mover, MoveOutcome, OutcomeStatus, SkipReason

__all__ = [
    "CandidateFile",
    "Scanner",
    "Mover",
    "MoveOutcome",
    "OutcomeStatus",
    "SkipReason",
]
