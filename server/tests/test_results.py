"""
Tests for aggregated analysis results.
"""

from dartlint.results import AnalysisResult
from dartlint.types import Diagnostic


def _diagnostic(rule_id, category, severity, file="/p/a.dart", line=1):
    return Diagnostic(
        rule_id=rule_id, category=category, severity=severity, file=file,
        line=line, column=1, end_line=line, end_column=2, message="m",
    )


class TestAnalysisResult:
    def setup_method(self):
        self.result = AnalysisResult.from_diagnostics([
            _diagnostic("avoid_print", "runtime", "info", file="/p/b.dart"),
            _diagnostic("avoid_empty_catch", "runtime", "error", line=4),
            _diagnostic("line_length", "style", "info", line=2),
        ], files_analyzed=3, rules_run=9)

    def test_sorted_on_construction(self):
        assert [(d.file, d.line) for d in self.result] == [
            ("/p/a.dart", 2), ("/p/a.dart", 4), ("/p/b.dart", 1),
        ]

    def test_filters(self):
        assert len(self.result.by_category("style")) == 1
        assert len(self.result.by_severity("info")) == 2
        assert len(self.result.by_file("b.dart")) == 1
        assert len(self.result.filter(category="runtime", severity="info")) == 1
        assert self.result.filter() == self.result

    def test_filter_preserves_order(self):
        ids = [d.rule_id for d in self.result.by_severity("info")]
        assert ids == ["line_length", "avoid_print"]

    def test_stats(self):
        stats = self.result.stats()

        assert stats.total == 3
        assert stats.errors == 1
        assert stats.info == 2
        assert stats.style_issues == 1
        assert stats.runtime_issues == 2
        assert stats.files_with_issues == 2
        assert self.result.has_errors()

    def test_summary(self):
        summary = self.result.summary()

        assert summary["files_analyzed"] == 3
        assert summary["rules_run"] == 9
        assert summary["total"] == 3

    def test_empty(self):
        empty = AnalysisResult()

        assert len(empty) == 0
        assert not empty.has_errors()
        assert empty.stats().total == 0
