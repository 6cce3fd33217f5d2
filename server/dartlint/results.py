"""
The aggregated output of an analysis run.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

from .types import Diagnostic


@dataclass(frozen=True)
class DiagnosticStats:
    total: int = 0
    errors: int = 0
    warnings: int = 0
    info: int = 0
    hints: int = 0
    style_issues: int = 0
    runtime_issues: int = 0
    files_with_issues: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "errors": self.errors,
            "warnings": self.warnings,
            "info": self.info,
            "hints": self.hints,
            "style_issues": self.style_issues,
            "runtime_issues": self.runtime_issues,
            "files_with_issues": self.files_with_issues,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Diagnostics sorted by (file, line, column, rule id).

    Use ``from_diagnostics`` to build one; it performs the sort. The run
    counters are informational and do not take part in equality.
    """
    diagnostics: Tuple[Diagnostic, ...] = ()
    files_analyzed: int = field(default=0, compare=False)
    rules_run: int = field(default=0, compare=False)

    @classmethod
    def from_diagnostics(cls, diagnostics: Iterable[Diagnostic],
                         files_analyzed: int = 0, rules_run: int = 0) -> "AnalysisResult":
        ordered = tuple(sorted(diagnostics, key=lambda d: d.sort_key))
        return cls(diagnostics=ordered, files_analyzed=files_analyzed, rules_run=rules_run)

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def filter(self, category: Optional[str] = None, severity: Optional[str] = None,
               file_substring: Optional[str] = None) -> "AnalysisResult":
        """Keep diagnostics matching every given criterion. Order is preserved."""
        kept = tuple(
            d for d in self.diagnostics
            if (category is None or d.category == category)
            and (severity is None or d.severity == severity)
            and (file_substring is None or file_substring in d.file)
        )
        return AnalysisResult(kept, self.files_analyzed, self.rules_run)

    def by_category(self, category: str) -> "AnalysisResult":
        return self.filter(category=category)

    def by_severity(self, severity: str) -> "AnalysisResult":
        return self.filter(severity=severity)

    def by_file(self, file_substring: str) -> "AnalysisResult":
        return self.filter(file_substring=file_substring)

    def has_errors(self) -> bool:
        return any(d.severity == "error" for d in self.diagnostics)

    def stats(self) -> DiagnosticStats:
        counts = {"error": 0, "warning": 0, "info": 0, "hint": 0}
        categories = {"style": 0, "runtime": 0}
        files = set()
        for d in self.diagnostics:
            counts[d.severity] = counts.get(d.severity, 0) + 1
            categories[d.category] = categories.get(d.category, 0) + 1
            files.add(d.file)
        return DiagnosticStats(
            total=len(self.diagnostics),
            errors=counts["error"],
            warnings=counts["warning"],
            info=counts["info"],
            hints=counts["hint"],
            style_issues=categories["style"],
            runtime_issues=categories["runtime"],
            files_with_issues=len(files),
        )

    def to_list(self) -> list:
        return [d.to_dict() for d in self.diagnostics]

    def summary(self) -> Dict[str, Any]:
        return {
            "files_analyzed": self.files_analyzed,
            "rules_run": self.rules_run,
            **self.stats().to_dict(),
        }
