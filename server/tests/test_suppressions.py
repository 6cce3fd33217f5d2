"""
Tests for inline suppression comments.
"""

from dartlint.suppressions import SuppressionParser, filter_suppressed
from dartlint.types import Diagnostic


def _diagnostic(rule_id: str, line: int) -> Diagnostic:
    return Diagnostic(
        rule_id=rule_id, category="runtime", severity="info", file="/a.dart",
        line=line, column=1, end_line=line, end_column=2, message="m",
    )


class TestSuppressionParser:
    def test_trailing_ignore(self):
        parser = SuppressionParser("print('x'); // ignore: avoid_print\nprint('y');\n")

        assert parser.is_suppressed("avoid_print", 1)
        assert not parser.is_suppressed("avoid_print", 2)
        assert not parser.is_suppressed("avoid_dynamic", 1)

    def test_standalone_ignore_applies_to_next_line(self):
        parser = SuppressionParser("// ignore: avoid_print, avoid_dynamic\nprint('x');\n")

        assert parser.is_suppressed("avoid_print", 2)
        assert parser.is_suppressed("avoid_dynamic", 2)
        assert not parser.is_suppressed("avoid_print", 1)

    def test_ignore_for_file(self):
        parser = SuppressionParser("// ignore_for_file: line_length\nvoid main() {}\n")

        assert parser.is_suppressed("line_length", 1)
        assert parser.is_suppressed("line_length", 50)
        assert not parser.is_suppressed("avoid_print", 2)

    def test_glob_patterns(self):
        parser = SuppressionParser("// ignore_for_file: avoid_*\n")

        assert parser.is_suppressed("avoid_print", 3)
        assert not parser.is_suppressed("unused_import", 3)


class TestFilterSuppressed:
    def test_filters_only_matching(self):
        text = "print('x'); // ignore: avoid_print\nprint('y');\n"
        diagnostics = [_diagnostic("avoid_print", 1), _diagnostic("avoid_print", 2)]

        kept = filter_suppressed(diagnostics, text)
        assert [d.line for d in kept] == [2]

    def test_no_comments(self):
        diagnostics = [_diagnostic("avoid_print", 1)]
        assert filter_suppressed(diagnostics, "print('x');\n") == diagnostics
