"""
Tests for source buffers and diagnostics.
"""

from dartlint.types import Diagnostic, SourceBuffer


class TestSourceBuffer:
    def test_byte_to_linecol_is_one_based(self):
        source = SourceBuffer.from_text("ab\ncd\n")

        assert source.byte_to_linecol(0) == (1, 1)
        assert source.byte_to_linecol(1) == (1, 2)
        assert source.byte_to_linecol(3) == (2, 1)
        assert source.byte_to_linecol(5) == (2, 3)

    def test_columns_count_characters(self):
        source = SourceBuffer.from_text("aé\nb")

        # "é" is two bytes in UTF-8
        assert source.byte_to_linecol(3) == (1, 3)
        assert source.byte_to_linecol(4) == (2, 1)
        assert source.offset_to_linecol(3) == (2, 1)

    def test_byte_to_point_is_zero_based_bytes(self):
        source = SourceBuffer.from_text("aé\nbc")
        assert source.byte_to_point(3) == (0, 3)
        assert source.byte_to_point(5) == (1, 1)

    def test_out_of_range_offsets_are_clamped(self):
        source = SourceBuffer.from_text("ab")
        assert source.byte_to_linecol(99) == (1, 3)
        assert source.byte_to_linecol(-1) == (1, 1)

    def test_line_count(self):
        assert SourceBuffer.from_text("a\nb\n").line_count == 3
        assert SourceBuffer.from_text("").line_count == 1

    def test_from_path_records_read_error(self, tmp_path):
        source = SourceBuffer.from_path(str(tmp_path / "missing.dart"))

        assert source.content == b""
        assert source.read_error

    def test_from_path_reads_bytes(self, tmp_path):
        path = tmp_path / "a.dart"
        path.write_bytes(b"class A {}\n")
        source = SourceBuffer.from_path(str(path))

        assert source.read_error is None
        assert source.text == "class A {}\n"
        assert source.path == str(path)


def _diagnostic(**overrides) -> Diagnostic:
    values = dict(
        rule_id="avoid_print", category="runtime", severity="info",
        file="/a.dart", line=1, column=1, end_line=1, end_column=5,
        message="m",
    )
    values.update(overrides)
    return Diagnostic(**values)


class TestDiagnostic:
    def test_sort_order(self):
        diagnostics = [
            _diagnostic(file="/b.dart"),
            _diagnostic(line=3),
            _diagnostic(line=1, column=4),
            _diagnostic(rule_id="avoid_dynamic"),
            _diagnostic(),
        ]
        ordered = sorted(diagnostics, key=lambda d: d.sort_key)

        assert [(d.file, d.line, d.column, d.rule_id) for d in ordered] == [
            ("/a.dart", 1, 1, "avoid_dynamic"),
            ("/a.dart", 1, 1, "avoid_print"),
            ("/a.dart", 1, 4, "avoid_print"),
            ("/a.dart", 3, 1, "avoid_print"),
            ("/b.dart", 1, 1, "avoid_print"),
        ]

    def test_to_dict(self):
        data = _diagnostic(suggestion="fix it").to_dict()

        assert data["rule_id"] == "avoid_print"
        assert data["end_column"] == 5
        assert data["suggestion"] == "fix it"
