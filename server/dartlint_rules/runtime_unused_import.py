"""
Rule: unused_import

An import is reported when none of the identifiers it exposes appears
anywhere in the file outside import/export directives. The exposed
identifiers are the ``as`` prefix if there is one, otherwise the ``show``
names, otherwise the file stem of the URI (``package:app/user_service.dart``
exposes ``user_service``).

This is a lexical heuristic. A library used only through the types it
declares (``import 'user.dart';`` followed by ``User? u;``) is reported even
though it is used.
"""

import re
from typing import Iterator, List, Tuple

from dartlint.extract import ImportView, extract_imports
from dartlint.types import Diagnostic, RuleContext, RuleMeta, StructuralRule


def exposed_names(imp: ImportView) -> Tuple[str, ...]:
    if imp.alias:
        return (imp.alias,)
    if imp.show:
        return imp.show
    return (imp.stem,) if imp.stem else ()


def _blank_ranges(text: bytes, ranges: List[Tuple[int, int]]) -> bytes:
    chunks = bytearray(text)
    for start, end in ranges:
        chunks[start:end] = b" " * (end - start)
    return bytes(chunks)


class UnusedImportRule(StructuralRule):
    """Flag imports whose exposed identifiers never appear in the file."""

    meta = RuleMeta(
        id="unused_import",
        category="runtime",
        kind="structural",
        severity="warning",
        description="Imports should be used",
    )

    def visit(self, ctx: RuleContext) -> Iterator[Diagnostic]:
        directives = extract_imports(ctx.tree)
        if not directives:
            return
        body = _blank_ranges(ctx.source.content, [(d.start_byte, d.end_byte) for d in directives])
        body_text = body.decode("utf-8", errors="replace")

        for imp in directives:
            if imp.directive != "import":
                continue
            names = exposed_names(imp)
            if not names or any(self._occurs(name, body_text) for name in names):
                continue
            yield self.diagnostic(
                ctx,
                imp.start_byte,
                imp.end_byte,
                f"Import '{imp.uri}' is unused",
                "Remove this unused import",
            )

    @staticmethod
    def _occurs(name: str, text: str) -> bool:
        return re.search(r"(?<![\w$])" + re.escape(name) + r"(?![\w$])", text) is not None


RULES = [UnusedImportRule]
