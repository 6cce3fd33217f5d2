"""
Tests for result serialization.
"""

import json

import pytest

from dartlint.results import AnalysisResult
from dartlint.schema import (
    PROTOCOL_VERSION,
    diagnostic_to_lsp,
    format_output,
    result_to_json,
    validate_diagnostic_dict,
    validate_output,
)
from dartlint.types import Diagnostic

DIAGNOSTIC = Diagnostic(
    rule_id="avoid_empty_catch", category="runtime", severity="error",
    file="/project/lib/errors.dart", line=4, column=5, end_line=4, end_column=17,
    message="Empty catch block swallows exceptions silently",
    suggestion="Handle the exception or at least log it",
)


class TestJsonOutput:
    def setup_method(self):
        self.result = AnalysisResult.from_diagnostics([DIAGNOSTIC], files_analyzed=2, rules_run=9)

    def test_document_shape(self):
        output = result_to_json(self.result, {"total_ms": 1.5})

        assert output["dartlint.protocol"] == PROTOCOL_VERSION
        assert output["files_scanned"] == 2
        assert output["rules_run"] == 9
        assert output["diagnostics"][0]["rule_id"] == "avoid_empty_catch"
        assert output["stats"]["errors"] == 1
        assert output["metrics"] == {"total_ms": 1.5}
        assert validate_output(output) == []

    def test_format_json_round_trips_through_json(self):
        output = json.loads(format_output(self.result, "json"))
        assert output["diagnostics"][0]["line"] == 4

    def test_format_text(self):
        text = format_output(self.result, "text")

        assert "/project/lib/errors.dart" in text
        assert "4:5 error" in text
        assert "(avoid_empty_catch)" in text
        assert "1 errors, 0 warnings" in text

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            format_output(self.result, "xml")


class TestValidation:
    def test_invalid_diagnostic(self):
        errors = validate_diagnostic_dict({"rule_id": "x", "severity": "fatal", "line": 0}, 3)

        assert all(e.startswith("Diagnostic 3: ") for e in errors)
        assert any("'file' is a required property" in e for e in errors)
        assert any("'fatal' is not one of" in e for e in errors)
        assert any("less than the minimum of 1" in e for e in errors)

    def test_valid_diagnostic(self):
        assert validate_diagnostic_dict(DIAGNOSTIC.to_dict()) == []

    def test_wrong_protocol(self):
        errors = validate_output({
            "dartlint.protocol": "0", "engine_version": "0.1.0",
            "files_scanned": 0, "diagnostics": [],
        })
        assert len(errors) == 1
        assert errors[0].startswith("Output validation:")

    def test_invalid_nested_diagnostic(self):
        output = result_to_json(AnalysisResult.from_diagnostics([DIAGNOSTIC]))
        output["diagnostics"][0]["line"] = -1

        errors = validate_output(output)
        assert errors and errors[0].startswith("Diagnostic 0:")


class TestLsp:
    def test_zero_based_range(self):
        lsp = diagnostic_to_lsp(DIAGNOSTIC)

        assert lsp["range"]["start"] == {"line": 3, "character": 4}
        assert lsp["range"]["end"] == {"line": 3, "character": 16}
        assert lsp["severity"] == 1
        assert lsp["code"] == "avoid_empty_catch"
        assert lsp["source"] == "dartlint"
        assert lsp["uri"].startswith("file://")
