"""
Tests for tree-sitter queries.
"""

import pytest

from dartlint.errors import PatternError
from dartlint.parser import parse
from dartlint.queries import PATTERNS, compile_library, compile_pattern, query, run_query


class TestCompilePattern:
    def test_unbalanced_pattern_raises(self):
        with pytest.raises(PatternError):
            compile_pattern("(class_definition")

    def test_unknown_node_type_raises(self):
        with pytest.raises(PatternError) as exc_info:
            compile_pattern("(not_a_real_node) @x")
        assert exc_info.value.pattern == "(not_a_real_node) @x"

    def test_empty_pattern_matches_nothing(self):
        compiled = compile_pattern("   ")

        assert compiled.query is None
        assert run_query(parse("class A {}\n"), compiled) == []

    def test_unknown_library_name(self):
        with pytest.raises(PatternError):
            compile_library(["nope"])


class TestRunQuery:
    def test_classes_library_pattern(self):
        compiled = compile_library(["classes"])["classes"]
        matches = run_query(parse("class A {}\nclass B {}\n"), compiled)

        assert [m.get("class.name").text for m in matches] == ["A", "B"]
        assert matches[0].get("class.def").node.type == "class_definition"
        assert matches[0].get("missing") is None

    def test_integer_literals(self):
        matches = query(parse("int x = 42;\n"), "(decimal_integer_literal) @num")

        assert [m.captures[0].text for m in matches] == ["42"]

    def test_text_predicate(self):
        code = "void target() {}\nvoid other() {}\nvoid main() { target(); }\n"
        matches = query(parse(code), '((identifier) @id (#eq? @id "target"))')

        assert len(matches) == 2
        assert {m.captures[0].text for m in matches} == {"target"}

    def test_captures_ordered_by_position(self):
        compiled = compile_library(["classes"])["classes"]
        match = run_query(parse("class Zed {}\n"), compiled)[0]

        assert [c.name for c in match.captures] == ["class.def", "class.name"]

    def test_imports_pattern(self):
        code = "import 'a.dart';\nexport 'b.dart';\n"
        matches = query(parse(code), PATTERNS["imports"])
        assert len(matches) == 2


def _texts(matches, capture):
    return [m.get(capture).text for m in matches]


class TestPatternLibrary:
    """Each library pattern matches its named shape and nothing else."""

    def _query(self, name, code):
        return query(parse(code), PATTERNS[name])

    def test_whole_library_compiles(self):
        compiled = compile_library()

        assert set(compiled) == set(PATTERNS)
        assert all(c.query is not None for c in compiled.values())

    def test_classes_negative(self):
        assert self._query("classes", "void main() {}\n") == []

    def test_methods(self):
        code = "void main() {}\n\nclass A {\n  void run() {}\n}\n"
        matches = self._query("methods", code)

        assert any(m.get("method.def") is not None for m in matches)
        assert any(m.get("function.def") is not None for m in matches)
        assert self._query("methods", "var x = 1;\n") == []

    def test_fields(self):
        code = """class Config {
  static const int retries = 3;
  String? label;

  void run() {}
}
"""
        names = _texts(self._query("fields", code), "field.names")

        assert len(names) == 2
        assert names[0].startswith("retries")
        assert names[1] == "label"

    def test_fields_ignores_top_level_variables(self):
        assert self._query("fields", "String? title;\n\nclass Empty {}\n") == []

    def test_imports_negative(self):
        assert self._query("imports", "class A {}\n") == []

    def test_dynamic_types(self):
        matches = self._query("dynamic_types", "dynamic x;\nvoid f(dynamic a) {}\n")

        assert _texts(matches, "type.name") == ["dynamic", "dynamic"]
        assert self._query("dynamic_types", "int x;\nvoid f(Object a) {}\n") == []

    def test_print_calls(self):
        matches = self._query("print_calls", "void main() {\n  print('hi');\n}\n")

        assert _texts(matches, "function") == ["print"]
        assert matches[0].get("args").text == "('hi')"

    def test_print_calls_ignores_member_calls(self):
        code = "void main() {\n  logger.print(1);\n  var print = 2;\n}\n"
        assert self._query("print_calls", code) == []

    def test_empty_catch(self):
        code = """void f() {
  try {
    g();
  } catch (e) {}
  try {
    g();
  } on FormatException {
  }
}
"""
        matches = self._query("empty_catch", code)

        assert [m.get("catch.body").node.start_point[0] for m in matches] == [3, 6]

    def test_empty_catch_ignores_handled_exceptions(self):
        code = """void f() {
  try {} catch (e) {
    log(e);
  }
  try {
    g();
  } finally {}
}
"""
        assert self._query("empty_catch", code) == []

    def test_null_assertions(self):
        code = "void f(String? x) {\n  var y = x!;\n  print(y);\n}\n"
        matches = self._query("null_assertions", code)

        assert _texts(matches, "null.operand") == ["x"]
        assert _texts(matches, "null.assertion") == ["!"]

    def test_null_assertions_ignores_other_operators(self):
        code = "void f(int a, bool b) {\n  a++;\n  var c = !b;\n  var d = a != 1;\n}\n"
        assert self._query("null_assertions", code) == []

    def test_typed_variables(self):
        code = "void f() {\n  int count = 1;\n  String? name;\n  var other = 2;\n}\n"
        matches = self._query("typed_variables", code)

        assert sorted(_texts(matches, "var.name")) == ["count", "name"]
        assert sorted(_texts(matches, "var.type")) == ["String", "int"]

    def test_typed_variables_ignores_inferred(self):
        code = "void f() {\n  var x = 1;\n  final y = 2;\n}\n"
        assert self._query("typed_variables", code) == []

    def test_type_parameters(self):
        matches = self._query("type_parameters", "class Box<T extends num, U> {}\n")

        assert _texts(matches, "param.name") == ["T", "U"]
        assert self._query("type_parameters", "class Plain {}\n") == []
