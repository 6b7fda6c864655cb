"""
Rule file loading and rule set assembly.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from file_sorter.utils.error_handler import InvalidRuleError, RuleFileError
from .rules import Rule, RuleSet, ScriptHook
from .script_rule import DEFAULT_SCRIPT_FUNCTION, load_script_rule

logger = logging.getLogger(__name__)

DEFAULT_RULES = {
    ".txt": "TextFiles",
    ".jpg": "Images",
    ".png": "Images",
    ".rs": "RustCode",
}

SCRIPT_POSITIONS = ("before", "after")


def read_rule_mapping(rules_path: Path) -> Dict[str, Any]:
    """Read an extension -> folder mapping from a JSON or YAML file.

    Both ``{"rules": {".txt": "TextFiles"}}`` and a flat mapping are accepted.

    Args:
        rules_path: Path to the rules file

    Returns:
        The mapping, in file order

    Raises:
        RuleFileError: If the file cannot be parsed or is not a mapping
    """
    try:
        with open(rules_path, "r", encoding="utf-8") as f:
            if rules_path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise RuleFileError(f"Cannot read rules from {rules_path}: {e}") from e

    if isinstance(data, dict) and "rules" in data:
        data = data["rules"]

    if not isinstance(data, dict):
        raise RuleFileError(f"Rules in {rules_path} must be a mapping of extension to folder")

    return data


def rules_from_mapping(mapping: Dict[str, Any]) -> List[Rule]:
    """Build extension rules, dropping entries that are not valid."""
    rules = []
    for extension, destination in mapping.items():
        try:
            rules.append(Rule.for_extension(extension, destination))
        except InvalidRuleError as e:
            logger.error(f"Ignoring rule '{extension}': {e}")
    return rules


def load_extension_rules(
    rules_path: Optional[Path], use_default_rules: bool = True
) -> List[Rule]:
    """Load extension rules from a file, falling back to the defaults.

    Args:
        rules_path: Rules file, or None to skip reading one
        use_default_rules: Whether to use DEFAULT_RULES when no usable file exists

    Returns:
        Extension rules in file order
    """
    fallback = rules_from_mapping(DEFAULT_RULES) if use_default_rules else []

    if rules_path is None or not Path(rules_path).exists():
        logger.info(f"No rules file found, using {len(fallback)} default rules")
        return fallback

    try:
        mapping = read_rule_mapping(Path(rules_path))
    except RuleFileError as e:
        logger.error(f"{e}; using {len(fallback)} default rules")
        return fallback

    rules = rules_from_mapping(mapping)
    logger.info(f"Loaded {len(rules)} rules from {rules_path}")
    return rules


def build_rule_set(
    extension_rules: List[Rule],
    script_rule: Optional[Rule] = None,
    script_position: str = "after",
) -> RuleSet:
    """Combine extension rules and an optional script rule into one RuleSet.

    Args:
        extension_rules: Rules derived from the rules file
        script_rule: Rule backed by a sorting script
        script_position: 'before' or 'after' the extension rules

    Returns:
        The ordered RuleSet
    """
    if script_position not in SCRIPT_POSITIONS:
        raise ValueError(f"script_position must be one of {SCRIPT_POSITIONS}")

    if script_rule is None:
        return RuleSet(extension_rules)

    if script_position == "before":
        return RuleSet([script_rule] + list(extension_rules))
    return RuleSet(list(extension_rules) + [script_rule])


def load_rule_set(
    rules_path: Optional[Path] = None,
    script_path: Optional[Path] = None,
    script_function: str = DEFAULT_SCRIPT_FUNCTION,
    script_position: str = "after",
    use_default_rules: bool = True,
    script_hook: Optional[ScriptHook] = None,
) -> RuleSet:
    """Load every rule source and return the RuleSet for one run.

    Args:
        rules_path: JSON/YAML rules file
        script_path: Python sorting script
        script_function: Function to call in the sorting script
        script_position: Where the script rule goes relative to extension rules
        use_default_rules: Fall back to DEFAULT_RULES without a rules file
        script_hook: Callable used instead of a script file

    Returns:
        RuleSet for the run
    """
    extension_rules = load_extension_rules(rules_path, use_default_rules)

    if script_hook is not None:
        script_rule = Rule.for_script(script_hook)
    elif script_path is not None:
        script_rule = load_script_rule(script_path, script_function)
    else:
        script_rule = None

    return build_rule_set(extension_rules, script_rule, script_position)
