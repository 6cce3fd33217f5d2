"""
Tests for the dartlint command line.
"""

import json

import pytest

from dartlint.cli import EXIT_FINDINGS, EXIT_OK, EXIT_USAGE, main
from dartlint.config import get_default_config, load_config


class TestAnalyzeCommand:
    def test_json_output(self, dart_project, capsys):
        code = main(["analyze", str(dart_project), "--format", "json"])
        output = json.loads(capsys.readouterr().out)

        assert code == EXIT_FINDINGS
        assert output["files_scanned"] == 3
        rule_ids = sorted(d["rule_id"] for d in output["diagnostics"])
        assert rule_ids == ["avoid_empty_catch", "avoid_print"]
        assert not any("generated.dart" in d["file"] for d in output["diagnostics"])
        assert "total_ms" in output["metrics"]

    def test_text_output(self, dart_project, capsys):
        main(["analyze", str(dart_project)])
        out = capsys.readouterr().out

        assert "Found 2 issues" in out
        assert "(avoid_empty_catch)" in out

    def test_style_only_has_no_errors(self, dart_project, capsys):
        assert main(["analyze", str(dart_project), "--style-only", "--format", "json"]) == EXIT_OK
        output = json.loads(capsys.readouterr().out)
        assert output["diagnostics"] == []

    def test_runtime_only(self, dart_project, capsys):
        assert main(["analyze", str(dart_project), "--runtime-only", "--jobs", "1"]) == EXIT_FINDINGS

    def test_style_and_runtime_only_are_exclusive(self, dart_project):
        with pytest.raises(SystemExit) as exc_info:
            main(["analyze", str(dart_project), "--style-only", "--runtime-only"])
        assert exc_info.value.code == 2

    def test_config_file_found_in_project(self, dart_project, capsys):
        (dart_project / "dartlint.yaml").write_text(
            "runtime_rules:\n  disabled_rules: [avoid_empty_catch]\n")

        assert main(["analyze", str(dart_project), "--format", "json"]) == EXIT_OK
        rule_ids = [d["rule_id"] for d in json.loads(capsys.readouterr().out)["diagnostics"]]
        assert rule_ids == ["avoid_print"]

    def test_max_line_length_flag(self, dart_project, capsys):
        main(["analyze", str(dart_project), "--max-line-length", "10", "--format", "json"])
        rule_ids = [d["rule_id"] for d in json.loads(capsys.readouterr().out)["diagnostics"]]
        assert "line_length" in rule_ids

    def test_invalid_config_is_usage_error(self, dart_project, tmp_path, capsys):
        bad = tmp_path / "bad.yaml"
        bad.write_text("max_line_length: -5\n")

        assert main(["analyze", str(dart_project), "--config", str(bad)]) == EXIT_USAGE
        assert "max_line_length" in capsys.readouterr().err


class TestInitConfigCommand:
    def test_writes_defaults(self, tmp_path):
        path = tmp_path / "dartlint.yaml"

        assert main(["init-config", str(path)]) == EXIT_OK
        assert load_config(str(path)) == get_default_config()

    def test_refuses_to_overwrite(self, tmp_path):
        path = tmp_path / "dartlint.yaml"
        path.write_text("max_line_length: 80\n")

        assert main(["init-config", str(path)]) == EXIT_USAGE
        assert main(["init-config", str(path), "--force"]) == EXIT_OK
        assert load_config(str(path)).max_line_length == 120


class TestRulesCommand:
    def test_lists_rules(self, dart_project, capsys):
        (dart_project / "dartlint.yaml").write_text(
            "runtime_rules:\n  disabled_rules: [avoid_print]\n")

        assert main(["rules", str(dart_project)]) == EXIT_OK
        lines = capsys.readouterr().out.splitlines()

        assert len(lines) == 9
        assert any(line.startswith("off avoid_print") for line in lines)
        assert any(line.startswith("on  line_length") for line in lines)
