"""
Tests for the avoid_dynamic rule.
"""

from dartlint.runner import evaluate_rule
from dartlint.types import RuleContext, SourceBuffer
from dartlint_rules.runtime_avoid_dynamic import AvoidDynamicRule


class TestAvoidDynamicRule:
    def setup_method(self):
        self.rule = AvoidDynamicRule()

    def _run_rule(self, code: str):
        ctx = RuleContext(source=SourceBuffer.from_text(code, "/project/lib/api.dart"))
        return evaluate_rule(self.rule, ctx)

    def test_dynamic_parameter_triggers(self):
        diagnostics = self._run_rule("void test(dynamic param) {}\n")

        assert len(diagnostics) == 1
        d = diagnostics[0]
        assert d.rule_id == "avoid_dynamic"
        assert d.severity == "warning"
        assert (d.line, d.column, d.end_column) == (1, 11, 18)
        assert d.suggestion == "Use a specific type or Object? instead"

    def test_specific_types_pass(self):
        code = "String greet(String name, Object? extra) {\n  return name;\n}\n"
        assert self._run_rule(code) == []

    def test_dynamic_in_field_and_return_type(self):
        code = """class Cache {
  dynamic value;
  dynamic read() => value;
}
"""
        diagnostics = self._run_rule(code)

        assert [d.line for d in diagnostics] == [2, 3]
