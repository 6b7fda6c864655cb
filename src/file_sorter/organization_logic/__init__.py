"""
Organization logic module for rule-based file sorting.
"""

from .rules import ExtensionEquals, Matcher, Rule, RuleSet, ScriptPredicate
from .resolver import Resolver
from .rule_loader import DEFAULT_RULES, load_rule_set
from .script_rule import load_script_hook, load_script_rule
from .organize_run import OrganizeRun, RunReport

__all__ = [
    "ExtensionEquals",
    "Matcher",
    "Rule",
    "RuleSet",
    "ScriptPredicate",
    "Resolver",
    "DEFAULT_RULES",
    "load_rule_set",
    "load_script_hook",
    "load_script_rule",
    "OrganizeRun",
    "RunReport",
]
