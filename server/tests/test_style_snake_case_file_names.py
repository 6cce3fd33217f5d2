"""
Tests for the snake_case_file_names rule.
"""

import pytest

from dartlint.registry import build_registry
from dartlint.runner import evaluate_rule
from dartlint.types import RuleContext, SourceBuffer
from dartlint_rules.naming import to_snake_case
from dartlint_rules.style_snake_case_file_names import SnakeCaseFileNamesRule


class TestSnakeCaseFileNamesRule:
    """Test cases for the file naming rule."""

    def setup_method(self):
        self.rule = SnakeCaseFileNamesRule()
        self.registry = build_registry([self.rule])

    def _run_rule(self, path: str, code: str = "void main() {}\n"):
        ctx = RuleContext(
            source=SourceBuffer.from_text(code, path),
            regexes=self.registry.regexes_for(self.rule),
        )
        return evaluate_rule(self.rule, ctx)

    @pytest.mark.parametrize("path", [
        "/project/lib/main.dart",
        "/project/lib/user_profile.dart",
        "/project/lib/api_v2.dart",
    ])
    def test_snake_case_names_pass(self, path):
        assert self._run_rule(path) == []

    def test_camel_case_file_triggers(self):
        diagnostics = self._run_rule("/project/lib/UserProfile.dart")

        assert len(diagnostics) == 1
        d = diagnostics[0]
        assert d.rule_id == "snake_case_file_names"
        assert d.severity == "warning"
        assert d.message == "File name 'UserProfile.dart' should use snake_case"
        assert d.suggestion == "Rename file to 'user_profile.dart'"
        assert (d.line, d.column) == (1, 1)

    def test_dashed_file_triggers(self):
        diagnostics = self._run_rule("/project/lib/user-profile.dart")

        assert len(diagnostics) == 1
        assert diagnostics[0].suggestion == "Rename file to 'user_profile.dart'"

    def test_non_dart_paths_are_ignored(self):
        assert self._run_rule("<memory>") == []


class TestToSnakeCase:
    def test_conversions(self):
        assert to_snake_case("UserProfile") == "user_profile"
        assert to_snake_case("HTTPClient") == "http_client"
        assert to_snake_case("user-profile") == "user_profile"
        assert to_snake_case("already_snake") == "already_snake"
