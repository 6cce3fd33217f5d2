"""
JSON schema and serialization for dartlint results.

Defines the JSON output contract of the CLI, validation helpers for it, and
the conversion to the Language Server Protocol diagnostic shape used when
merging with a language server's own diagnostics.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from .results import AnalysisResult
from .types import CATEGORIES, SEVERITIES, Diagnostic

# Current protocol version
PROTOCOL_VERSION = "1"
ENGINE_VERSION = "0.1.0"

_POSITION = {"type": "integer", "minimum": 1}

# JSON Schema for a single Diagnostic
DIAGNOSTIC_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "rule_id": {
            "type": "string",
            "description": "Rule identifier that produced this diagnostic"
        },
        "category": {"type": "string", "enum": list(CATEGORIES)},
        "severity": {"type": "string", "enum": list(SEVERITIES)},
        "file": {
            "type": "string",
            "description": "Absolute path of the analyzed file"
        },
        "line": _POSITION,
        "column": _POSITION,
        "end_line": _POSITION,
        "end_column": _POSITION,
        "message": {"type": "string"},
        "suggestion": {
            "type": ["string", "null"],
            "description": "Suggested fix text"
        },
    },
    "required": [
        "rule_id", "category", "severity", "file",
        "line", "column", "end_line", "end_column", "message",
    ],
    "additionalProperties": False,
}

# JSON Schema for the full CLI output
OUTPUT_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "dartlint.protocol": {"const": PROTOCOL_VERSION},
        "engine_version": {"type": "string"},
        "files_scanned": {"type": "integer", "minimum": 0},
        "rules_run": {"type": "integer", "minimum": 0},
        "diagnostics": {"type": "array"},
        "stats": {"type": "object"},
        "metrics": {"type": "object"},
    },
    "required": ["dartlint.protocol", "engine_version", "files_scanned", "diagnostics"],
}

_DIAGNOSTIC_VALIDATOR = jsonschema.Draft7Validator(DIAGNOSTIC_JSON_SCHEMA)
_OUTPUT_VALIDATOR = jsonschema.Draft7Validator(OUTPUT_JSON_SCHEMA)

# LSP DiagnosticSeverity
LSP_SEVERITY = {"error": 1, "warning": 2, "info": 3, "hint": 4}

SOURCE_NAME = "dartlint"


def result_to_json(result: AnalysisResult, metrics: Optional[Dict[str, float]] = None) -> Dict[str, Any]:
    """Build the top-level JSON document for a run."""
    return {
        "dartlint.protocol": PROTOCOL_VERSION,
        "engine_version": ENGINE_VERSION,
        "files_scanned": result.files_analyzed,
        "rules_run": result.rules_run,
        "diagnostics": result.to_list(),
        "stats": result.stats().to_dict(),
        "metrics": metrics or {},
    }


def diagnostic_to_lsp(diagnostic: Diagnostic) -> Dict[str, Any]:
    """Convert to an LSP ``Diagnostic`` with a 0-based range.

    The target file travels separately in LSP, so it is returned under
    ``uri`` for the caller to group by.
    """
    return {
        "uri": Path(diagnostic.file).as_uri() if Path(diagnostic.file).is_absolute() else diagnostic.file,
        "range": {
            "start": {"line": diagnostic.line - 1, "character": diagnostic.column - 1},
            "end": {"line": diagnostic.end_line - 1, "character": diagnostic.end_column - 1},
        },
        "severity": LSP_SEVERITY[diagnostic.severity],
        "code": diagnostic.rule_id,
        "source": SOURCE_NAME,
        "message": diagnostic.message,
    }


def validate_diagnostic_dict(data: Dict[str, Any], index: int = 0) -> List[str]:
    """
    Validate one serialized diagnostic against the schema.

    Returns:
        List of validation errors (empty if valid)
    """
    return [
        f"Diagnostic {index}: {error.message}"
        for error in sorted(_DIAGNOSTIC_VALIDATOR.iter_errors(data), key=lambda e: e.message)
    ]


def validate_output(output: Dict[str, Any]) -> List[str]:
    """
    Validate CLI JSON output, including every diagnostic it carries.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = [
        f"Output validation: {error.message}"
        for error in sorted(_OUTPUT_VALIDATOR.iter_errors(output), key=lambda e: e.message)
    ]
    diagnostics = output.get("diagnostics")
    if isinstance(diagnostics, list):
        for i, item in enumerate(diagnostics):
            errors.extend(validate_diagnostic_dict(item, i))
    return errors


def format_text(result: AnalysisResult) -> str:
    """Human-readable report grouped by file."""
    lines = [f"Scanned {result.files_analyzed} files with {result.rules_run} rules",
             f"Found {len(result)} issues", ""]

    current_file = None
    for d in result:
        if d.file != current_file:
            if current_file is not None:
                lines.append("")
            lines.append(d.file)
            current_file = d.file
        lines.append(f"  {d.line}:{d.column} {d.severity} {d.message} ({d.rule_id})")
        if d.suggestion:
            lines.append(f"      fix: {d.suggestion}")

    stats = result.stats()
    lines.append("")
    lines.append(f"{stats.errors} errors, {stats.warnings} warnings, {stats.info} info, {stats.hints} hints")
    return "\n".join(lines)


def format_output(result: AnalysisResult, format_type: str,
                  metrics: Optional[Dict[str, float]] = None) -> str:
    """Format output according to specified format."""
    if format_type == "json":
        return json.dumps(result_to_json(result, metrics), indent=2)
    if format_type == "text":
        return format_text(result)
    raise ValueError(f"Unknown format: {format_type}")
