"""
Core types for the dartlint engine.

This module provides the shared dataclasses used across the parser, the
extraction layer, the rules and the analysis engine.
"""

import bisect
import os
import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Iterable, List, Literal, Optional, Pattern, Protocol, Tuple


# Type aliases for clarity
Severity = Literal["error", "warning", "info", "hint"]
Category = Literal["style", "runtime"]
RuleKind = Literal["pattern", "structural"]
Point = Tuple[int, int]  # (row, byte_column) 0-based, tree-sitter native

SEVERITIES: Tuple[str, ...] = ("error", "warning", "info", "hint")
CATEGORIES: Tuple[str, ...] = ("style", "runtime")
RULE_KINDS: Tuple[str, ...] = ("pattern", "structural")

# Rule ids used for diagnostics the engine emits about itself
INTERNAL_ERROR_RULE = "internal_error"
IO_ERROR_RULE = "io_error"


@dataclass(frozen=True)
class SourceBuffer:
    """The content of one source file, owned by a single analysis pass.

    Content is kept as raw bytes since every offset coming out of tree-sitter
    is a byte offset. ``read_error`` is set when the file could not be read;
    such a buffer is empty and only produces an ``io_error`` diagnostic.
    """
    path: str
    content: bytes
    read_error: Optional[str] = None

    @classmethod
    def from_text(cls, text: str, path: str = "<memory>") -> "SourceBuffer":
        return cls(path=path, content=text.encode("utf-8"))

    @classmethod
    def from_path(cls, path: str) -> "SourceBuffer":
        """Read a file from disk. Read failures are recorded, not raised."""
        abs_path = os.path.abspath(path)
        try:
            with open(abs_path, "rb") as f:
                return cls(path=abs_path, content=f.read())
        except OSError as e:
            return cls(path=abs_path, content=b"", read_error=str(e))

    @cached_property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @cached_property
    def _byte_line_starts(self) -> List[int]:
        starts = [0]
        for match in re.finditer(b"\n", self.content):
            starts.append(match.end())
        return starts

    @cached_property
    def _char_line_starts(self) -> List[int]:
        starts = [0]
        for match in re.finditer("\n", self.text):
            starts.append(match.end())
        return starts

    @property
    def line_count(self) -> int:
        return len(self._byte_line_starts)

    def byte_to_linecol(self, byte_offset: int) -> Tuple[int, int]:
        """Convert a byte offset to a 1-based (line, column) pair.

        Columns count characters, not bytes.
        """
        byte_offset = max(0, min(byte_offset, len(self.content)))
        line_index = bisect.bisect_right(self._byte_line_starts, byte_offset) - 1
        line_start = self._byte_line_starts[line_index]
        prefix = self.content[line_start:byte_offset].decode("utf-8", errors="replace")
        return line_index + 1, len(prefix) + 1

    def offset_to_linecol(self, char_offset: int) -> Tuple[int, int]:
        """Convert a character offset into ``text`` to a 1-based (line, column) pair."""
        char_offset = max(0, min(char_offset, len(self.text)))
        line_index = bisect.bisect_right(self._char_line_starts, char_offset) - 1
        return line_index + 1, char_offset - self._char_line_starts[line_index] + 1

    def byte_to_point(self, byte_offset: int) -> Point:
        """Convert a byte offset to a tree-sitter (row, byte_column) point."""
        byte_offset = max(0, min(byte_offset, len(self.content)))
        row = bisect.bisect_right(self._byte_line_starts, byte_offset) - 1
        return row, byte_offset - self._byte_line_starts[row]

    def slice(self, start_byte: int, end_byte: int) -> str:
        return self.content[start_byte:end_byte].decode("utf-8", errors="replace")


@dataclass(frozen=True)
class Diagnostic:
    """A single issue reported by a rule.

    Lines and columns are 1-based, columns count characters and the end
    position is exclusive.
    """
    rule_id: str
    category: Category
    severity: Severity
    file: str
    line: int
    column: int
    end_line: int
    end_column: int
    message: str
    suggestion: Optional[str] = None

    @property
    def sort_key(self) -> Tuple[Any, ...]:
        # The trailing fields only break ties so equal keys still sort the same way
        return (self.file, self.line, self.column, self.rule_id,
                self.end_line, self.end_column, self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "category": self.category,
            "severity": self.severity,
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "end_line": self.end_line,
            "end_column": self.end_column,
            "message": self.message,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class RuleMeta:
    """Metadata about a rule.

    Attributes:
        id: Unique rule identifier (e.g., "avoid_print")
        category: "style" or "runtime"
        kind: "pattern" for lexical rules, "structural" for rules that need
            the syntax tree
        severity: Fixed severity of every diagnostic the rule emits
        description: Human-readable description
    """
    id: str
    category: Category
    kind: RuleKind
    severity: Severity
    description: str = ""


@dataclass(frozen=True)
class RuleDescriptor:
    """A rule's metadata together with its enabled state under a config."""
    id: str
    category: Category
    kind: RuleKind
    severity: Severity
    enabled: bool
    description: str = ""


@dataclass
class RuleContext:
    """Context passed to rules during execution.

    ``tree`` is only populated for structural rules. ``regexes`` holds the
    rule's own compiled textual patterns and ``queries`` the library query
    patterns it asked for, both compiled once by the registry.
    """
    source: SourceBuffer
    config: Dict[str, Any] = field(default_factory=dict)
    tree: Any = None  # SyntaxTree
    regexes: Dict[str, Pattern] = field(default_factory=dict)
    queries: Dict[str, Any] = field(default_factory=dict)  # name -> CompiledPattern

    @property
    def file_path(self) -> str:
        return self.source.path

    @property
    def text(self) -> str:
        return self.source.text

    def query(self, name: str) -> List[Any]:
        """Run one of the rule's compiled library patterns over the tree."""
        from .queries import run_query
        if self.tree is None:
            return []
        return run_query(self.tree, self.queries[name])


class Rule(Protocol):
    """Protocol that all rules must implement."""
    meta: RuleMeta

    def visit(self, ctx: RuleContext) -> Iterable[Diagnostic]:
        ...


class BaseRule:
    """Shared helpers for building diagnostics."""

    meta: RuleMeta

    def visit(self, ctx: RuleContext) -> Iterable[Diagnostic]:
        raise NotImplementedError

    def diagnostic(self, ctx: RuleContext, start_byte: int, end_byte: int,
                   message: str, suggestion: Optional[str] = None) -> Diagnostic:
        """Build a diagnostic from a byte range in the current file."""
        line, column = ctx.source.byte_to_linecol(start_byte)
        end_line, end_column = ctx.source.byte_to_linecol(end_byte)
        return self.diagnostic_at(ctx, line, column, end_line, end_column, message, suggestion)

    def diagnostic_at(self, ctx: RuleContext, line: int, column: int,
                      end_line: int, end_column: int, message: str,
                      suggestion: Optional[str] = None) -> Diagnostic:
        return Diagnostic(
            rule_id=self.meta.id,
            category=self.meta.category,
            severity=self.meta.severity,
            file=ctx.file_path,
            line=line,
            column=column,
            end_line=end_line,
            end_column=end_column,
            message=message,
            suggestion=suggestion,
        )


class PatternRule(BaseRule):
    """A rule evaluated purely against raw text.

    ``patterns`` maps a name to a regular expression source; the registry
    compiles each one and hands them to ``visit`` as ``ctx.regexes``.
    """

    patterns: Dict[str, str] = {}


class StructuralRule(BaseRule):
    """A rule evaluated against the syntax tree.

    ``queries`` names the library patterns (see ``dartlint.queries.PATTERNS``)
    the rule runs through ``ctx.query``.
    """

    queries: Tuple[str, ...] = ()
