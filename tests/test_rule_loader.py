"""
Tests for loading rule files and assembling rule sets.
"""

import json
import shutil
import tempfile
from pathlib import Path

import pytest
import yaml

from file_sorter.organization_logic.rule_loader import (
    DEFAULT_RULES,
    build_rule_set,
    load_extension_rules,
    load_rule_set,
    read_rule_mapping,
)
from file_sorter.organization_logic.rules import Rule, ScriptPredicate
from file_sorter.utils.error_handler import RuleFileError


class TestRuleLoader:
    """Test reading rule files."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def _write_json(self, data, name="rules.json") -> Path:
        path = self.temp_dir / name
        with open(path, "w") as f:
            json.dump(data, f)
        return path

    def test_wrapped_json_rules(self):
        """Test the {"rules": {...}} layout."""
        path = self._write_json({"rules": {".md": "Docs", ".txt": "TextFiles"}})

        assert read_rule_mapping(path) == {".md": "Docs", ".txt": "TextFiles"}

    def test_flat_yaml_rules(self):
        """Test a flat YAML mapping."""
        path = self.temp_dir / "rules.yaml"
        with open(path, "w") as f:
            yaml.safe_dump({".csv": "Data"}, f)

        assert read_rule_mapping(path) == {".csv": "Data"}

    def test_malformed_file_raises(self):
        """Test unparseable files raise RuleFileError."""
        path = self.temp_dir / "rules.json"
        path.write_text("{not json")

        with pytest.raises(RuleFileError):
            read_rule_mapping(path)

    def test_non_mapping_raises(self):
        """Test a list of rules is rejected."""
        path = self._write_json({"rules": [".txt", "TextFiles"]})

        with pytest.raises(RuleFileError):
            read_rule_mapping(path)

    def test_file_order_is_rule_order(self):
        """Test rules keep the order they appear in the file."""
        path = self._write_json({"rules": {".png": "Pictures", ".txt": "Text", ".rs": "Code"}})

        rules = load_extension_rules(path)

        assert [r.matcher.extension for r in rules] == [".png", ".txt", ".rs"]

    def test_missing_file_uses_defaults(self):
        """Test the built-in rules apply without a rules file."""
        rules = load_extension_rules(self.temp_dir / "missing.json")

        assert {r.matcher.extension: r.destination for r in rules} == DEFAULT_RULES

    def test_missing_file_without_defaults(self):
        """Test defaults can be switched off."""
        assert load_extension_rules(self.temp_dir / "missing.json", use_default_rules=False) == []

    def test_malformed_file_falls_back_to_defaults(self):
        """Test a broken rules file does not stop sorting."""
        path = self.temp_dir / "rules.json"
        path.write_text("[1, 2")

        rules = load_extension_rules(path)

        assert len(rules) == len(DEFAULT_RULES)

    def test_invalid_entries_dropped(self):
        """Test unusable entries are skipped and the rest kept."""
        path = self._write_json(
            {"rules": {".txt": "TextFiles", ".bad": "../escape", ".num": 3, ".jpg": "Images"}}
        )

        rules = load_extension_rules(path)

        assert [r.destination for r in rules] == ["TextFiles", "Images"]

    def test_multi_part_extension_dropped(self):
        """Test a rule for a compound suffix is dropped, not loaded unmatched."""
        path = self._write_json({"rules": {".tar.gz": "Archives", ".zip": "Archives"}})

        rules = load_extension_rules(path)

        assert [r.matcher.extension for r in rules] == [".zip"]

    def test_empty_rules_file(self):
        """Test an empty mapping is a valid, empty rule set."""
        path = self._write_json({"rules": {}})

        assert len(load_rule_set(rules_path=path)) == 0


class TestBuildRuleSet:
    """Test placement of the script rule."""

    def setup_method(self):
        """Set up test fixtures."""
        self.extension_rules = [Rule.for_extension(".txt", "TextFiles")]
        self.script_rule = Rule.for_script(lambda p: "Scripted")

    def test_script_after_by_default(self):
        """Test the script rule follows the extension rules."""
        rules = list(build_rule_set(self.extension_rules, self.script_rule))

        assert isinstance(rules[-1].matcher, ScriptPredicate)

    def test_script_before(self):
        """Test the script rule can take precedence."""
        rules = list(build_rule_set(self.extension_rules, self.script_rule, "before"))

        assert isinstance(rules[0].matcher, ScriptPredicate)

    def test_invalid_position(self):
        """Test unknown positions are rejected."""
        with pytest.raises(ValueError):
            build_rule_set(self.extension_rules, self.script_rule, "middle")

    def test_no_script(self):
        """Test extension rules alone."""
        assert len(build_rule_set(self.extension_rules)) == 1

    def test_hook_overrides_script_file(self, tmp_path):
        """Test an in-process hook wins over a script path."""
        script = tmp_path / "sort_rules.py"
        script.write_text("def sort_file(path):\n    return 'FromFile'\n")

        rules = load_rule_set(
            rules_path=None,
            script_path=script,
            use_default_rules=False,
            script_hook=lambda p: "FromHook",
        )

        assert len(rules) == 1
        assert next(iter(rules)).matcher.hook("x") == "FromHook"
