"""
Organization rules: matchers, rules and ordered rule sets.
"""

import logging
from typing import Callable, FrozenSet, Iterable, Iterator, Optional, Tuple

from file_sorter.file_access.scanner import CandidateFile
from file_sorter.utils.error_handler import InvalidRuleError, ScriptError

logger = logging.getLogger(__name__)

ScriptHook = Callable[[str], Optional[str]]


def validate_destination(destination: str) -> str:
    """Check that a destination is a single folder name below the root.

    Args:
        destination: Folder name produced by a rule or script

    Returns:
        The destination, unchanged

    Raises:
        InvalidRuleError: If the destination is empty or could escape the root
    """
    if not isinstance(destination, str) or not destination:
        raise InvalidRuleError(f"Destination must be a non-empty string: {destination!r}")

    if destination.strip() != destination:
        raise InvalidRuleError(
            f"Destination cannot be blank or padded with whitespace: {destination!r}"
        )

    if "/" in destination or "\\" in destination or "\0" in destination:
        raise InvalidRuleError(
            f"Destination must be a single folder name: {destination!r}"
        )

    if destination in (".", ".."):
        raise InvalidRuleError(f"Destination cannot be {destination!r}")

    return destination


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and make sure it starts with a dot."""
    if not isinstance(extension, str) or not extension.strip("."):
        raise InvalidRuleError(f"Invalid extension: {extension!r}")

    extension = extension.lower()
    if not extension.startswith("."):
        extension = "." + extension

    # only the trailing suffix of a file name is ever compared
    if "." in extension[1:]:
        raise InvalidRuleError(f"Extension must be a single suffix: {extension!r}")

    return extension


class Matcher:
    """Base class for rule match strategies."""

    def resolve(self, candidate: CandidateFile, destination: Optional[str]) -> Optional[str]:
        """Return the destination for ``candidate`` or None if it does not match."""
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError


class ExtensionEquals(Matcher):
    """Match files whose trailing extension equals a configured one."""

    def __init__(self, extension: str):
        self.extension = normalize_extension(extension)

    def matches(self, candidate: CandidateFile) -> bool:
        return candidate.extension.lower() == self.extension

    def resolve(self, candidate: CandidateFile, destination: Optional[str]) -> Optional[str]:
        return destination if self.matches(candidate) else None

    def describe(self) -> str:
        return f"extension == {self.extension}"

    def __eq__(self, other):
        return isinstance(other, ExtensionEquals) and other.extension == self.extension

    def __hash__(self):
        return hash(("extension", self.extension))

    def __repr__(self):
        return f"ExtensionEquals({self.extension!r})"


class ScriptPredicate(Matcher):
    """Delegate matching to a user supplied hook.

    The hook receives the file path as a string and returns a folder name, or
    None / an empty string for no match. Anything else is reported as a
    ScriptError.
    """

    def __init__(self, hook: ScriptHook, name: str = "script"):
        if not callable(hook):
            raise InvalidRuleError(f"Script hook is not callable: {hook!r}")
        self.hook = hook
        self.name = name

    def resolve(self, candidate: CandidateFile, destination: Optional[str] = None) -> Optional[str]:
        try:
            result = self.hook(str(candidate.path))
        except Exception as e:
            raise ScriptError(f"{self.name} raised for {candidate.path}: {e}") from e

        if result is None or result == "":
            return None

        if not isinstance(result, str):
            raise ScriptError(
                f"{self.name} returned {type(result).__name__} for {candidate.path}, "
                "expected a folder name"
            )

        try:
            return validate_destination(result)
        except InvalidRuleError as e:
            raise ScriptError(f"{self.name} returned an invalid destination: {e}") from e

    def describe(self) -> str:
        return f"script {self.name}"

    def __repr__(self):
        return f"ScriptPredicate({self.name!r})"


class Rule:
    """A matcher paired with the folder it sends matching files to."""

    def __init__(self, matcher: Matcher, destination: Optional[str] = None):
        if not isinstance(matcher, Matcher):
            raise InvalidRuleError(f"Unsupported matcher: {matcher!r}")

        if isinstance(matcher, ScriptPredicate):
            if destination is not None:
                raise InvalidRuleError("Script rules take their destination from the script")
        else:
            validate_destination(destination)

        self.matcher = matcher
        self.destination = destination

    @classmethod
    def for_extension(cls, extension: str, destination: str) -> "Rule":
        return cls(ExtensionEquals(extension), destination)

    @classmethod
    def for_script(cls, hook: ScriptHook, name: str = "script") -> "Rule":
        return cls(ScriptPredicate(hook, name=name))

    @property
    def name(self) -> str:
        if self.destination:
            return f"{self.matcher.describe()} -> {self.destination}"
        return self.matcher.describe()

    def apply(self, candidate: CandidateFile) -> Optional[str]:
        """Evaluate the rule.

        Raises:
            ScriptError: If a script matcher fails
        """
        return self.matcher.resolve(candidate, self.destination)

    def __repr__(self):
        return f"Rule({self.matcher!r}, {self.destination!r})"


class RuleSet:
    """Ordered, read-only collection of rules. Earlier rules take precedence."""

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: Tuple[Rule, ...] = tuple(rules)

    @classmethod
    def from_mapping(cls, mapping) -> "RuleSet":
        """Build one extension rule per mapping entry, in iteration order."""
        return cls(Rule.for_extension(ext, dest) for ext, dest in mapping.items())

    def destinations(self) -> FrozenSet[str]:
        """Folder names known before any file is resolved."""
        return frozenset(r.destination for r in self._rules if r.destination)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __add__(self, other: "RuleSet") -> "RuleSet":
        return RuleSet(self._rules + tuple(other))

    def __repr__(self):
        return f"RuleSet({list(self._rules)!r})"
