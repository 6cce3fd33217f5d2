"""
Inline suppression comments.

Follows the Dart analyzer convention:

    foo(); // ignore: avoid_print, avoid_dynamic

    // ignore: avoid_print
    print('x');

    // ignore_for_file: line_length

A trailing ``// ignore:`` applies to its own line. A comment line holding
nothing but ``// ignore:`` applies to the next line. ``ignore_for_file``
applies to the whole file. Rule names may be globs (``avoid_*``).
"""

import fnmatch
import re
from typing import Dict, Iterable, List, Set

from .types import Diagnostic

_IGNORE_RE = re.compile(r"//\s*ignore\s*:\s*([\w\s,*?\-]+)")
_IGNORE_FILE_RE = re.compile(r"//\s*ignore_for_file\s*:\s*([\w\s,*?\-]+)")
_STANDALONE_RE = re.compile(r"^\s*//\s*ignore\s*:")


def _split_names(raw: str) -> Set[str]:
    return {name.strip() for name in raw.split(",") if name.strip()}


class SuppressionParser:
    """Parser for ``// ignore:`` and ``// ignore_for_file:`` comments."""

    def __init__(self, text: str):
        self.text = text
        self.lines = text.split('\n')
        self.line_suppressions: Dict[int, Set[str]] = {}  # line_number -> {rule_patterns}
        self.file_suppressions: Set[str] = set()
        self._parse_suppressions()

    def _parse_suppressions(self):
        for line_num, line in enumerate(self.lines, 1):
            file_match = _IGNORE_FILE_RE.search(line)
            if file_match:
                self.file_suppressions |= _split_names(file_match.group(1))
                continue

            match = _IGNORE_RE.search(line)
            if not match:
                continue
            names = _split_names(match.group(1))
            target = line_num + 1 if _STANDALONE_RE.match(line) else line_num
            self.line_suppressions.setdefault(target, set()).update(names)

    def is_suppressed(self, rule_id: str, line: int) -> bool:
        """Check if a diagnostic of ``rule_id`` starting on ``line`` is suppressed."""
        patterns = self.file_suppressions | self.line_suppressions.get(line, set())
        return any(rule_id == p or fnmatch.fnmatch(rule_id, p) for p in patterns)


def filter_suppressed(diagnostics: Iterable[Diagnostic], text: str) -> List[Diagnostic]:
    """Drop diagnostics silenced by inline comments."""
    diagnostics = list(diagnostics)
    if not diagnostics or "ignore" not in text:
        return diagnostics

    parser = SuppressionParser(text)
    return [d for d in diagnostics if not parser.is_suppressed(d.rule_id, d.line)]
