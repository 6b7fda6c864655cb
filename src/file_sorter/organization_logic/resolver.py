"""
Resolve a file to its destination folder using an ordered rule set.
"""

import logging
from typing import Optional

from file_sorter.file_access.scanner import CandidateFile
from file_sorter.utils.error_handler import ScriptError
from .rules import RuleSet

logger = logging.getLogger(__name__)


class Resolver:
    """First-match-wins evaluation of a RuleSet."""

    def resolve(self, candidate: CandidateFile, rules: RuleSet) -> Optional[str]:
        """Determine the destination folder for a file.

        Args:
            candidate: File to classify
            rules: Rules in precedence order

        Returns:
            Destination folder name, or None if no rule matched
        """
        for rule in rules:
            try:
                destination = rule.apply(candidate)
            except ScriptError as e:
                logger.warning(f"Rule '{rule.name}' failed, treating as no match: {e}")
                continue

            if destination is not None:
                logger.debug(f"Rule '{rule.name}' matched {candidate.name} -> {destination}")
                return destination

        logger.debug(f"No rule matched {candidate.name}")
        return None
