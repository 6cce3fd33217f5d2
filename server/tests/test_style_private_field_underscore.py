"""
Tests for the private_field_underscore rule.
"""

from dartlint.runner import evaluate_rule
from dartlint.types import RuleContext, SourceBuffer
from dartlint_rules.style_private_field_underscore import (
    PrivateFieldUnderscoreRule,
    suggest_private_name,
)


class TestPrivateFieldUnderscoreRule:
    def setup_method(self):
        self.rule = PrivateFieldUnderscoreRule()

    def _run_rule(self, code: str):
        ctx = RuleContext(source=SourceBuffer.from_text(code, "/project/lib/account.dart"))
        return evaluate_rule(self.rule, ctx)

    def test_private_prefix_triggers(self):
        code = """class Account {
  String privateToken = '';
}
"""
        diagnostics = self._run_rule(code)

        assert len(diagnostics) == 1
        d = diagnostics[0]
        assert d.rule_id == "private_field_underscore"
        assert d.severity == "info"
        assert d.line == 2
        assert d.suggestion == "Rename to '_token'"

    def test_public_and_underscored_fields_pass(self):
        code = """class Account {
  String name = '';
  int _balance = 0;
  final String privacyPolicyUrl = '';
}
"""
        assert self._run_rule(code) == []

    def test_local_variables_are_not_fields(self):
        code = """void main() {
  var privateValue = 1;
  print(privateValue);
}
"""
        assert self._run_rule(code) == []


class TestSuggestPrivateName:
    def test_suggestions(self):
        assert suggest_private_name("privateToken") == "_token"
        assert suggest_private_name("private_key") == "_key"
        assert suggest_private_name("count_") == "_count"

    def test_names_left_alone(self):
        assert suggest_private_name("_count") is None
        assert suggest_private_name("privacy") is None
        assert suggest_private_name("name") is None
        assert suggest_private_name("_") is None
