"""
Rule: avoid_null_check_on_nullable

Reports the postfix null assertion operator (``value!``) applied to an
identifier that the same file declares with a nullable type (``String?``).
The declaration lookup is by name only; there is no scope resolution. Member
access is skipped except through ``this``, so ``this.value!`` is checked
against the file's nullable names while ``other.value!`` is not.
"""

import re
from typing import Iterator, Set

from dartlint.extract import extract_fields, extract_type_annotations, extract_variables
from dartlint.parser import SyntaxTree
from dartlint.types import Diagnostic, RuleContext, RuleMeta, StructuralRule

_DECLARED_AFTER_TYPE_RE = re.compile(rb"\s*(?:get\s+|this\s*\.\s*)?([A-Za-z_$][\w$]*)")
_RECEIVER_RE = re.compile(rb"([A-Za-z_$][\w$]*)\s*$")
_THIS_DOT_RE = re.compile(rb"(?<![\w$.])this\s*\.\s*$")
_POSTFIX_OPERAND_END = re.compile(rb"[\w$)\]]")
_NOT_DECLARATIONS = frozenset({b"Function", b"extends", b"implements", b"with", b"in", b"is", b"as"})


def nullable_names(tree: SyntaxTree) -> Set[str]:
    """Names declared in the file with a nullable type annotation."""
    names = set()
    content = tree.source.content
    for annotation in extract_type_annotations(tree):
        if not annotation.is_nullable or annotation.is_type_argument:
            continue
        match = _DECLARED_AFTER_TYPE_RE.match(content, annotation.full_end_byte)
        if match and match.group(1) not in _NOT_DECLARATIONS:
            names.add(match.group(1).decode("utf-8", errors="replace"))
    names.update(f.name for f in extract_fields(tree) if f.is_nullable)
    names.update(v.name for v in extract_variables(tree) if v.is_nullable)
    return names


class AvoidNullCheckOnNullableRule(StructuralRule):
    """Flag value! where value is declared nullable."""

    meta = RuleMeta(
        id="avoid_null_check_on_nullable",
        category="runtime",
        kind="structural",
        severity="warning",
        description="Avoid the null assertion operator on nullable values",
    )

    def visit(self, ctx: RuleContext) -> Iterator[Diagnostic]:
        content = ctx.source.content
        nullable = None
        for node in ctx.tree.walk():
            if node.child_count != 0 or content[node.start_byte:node.end_byte] != b"!":
                continue
            start = node.start_byte
            if start == 0 or not _POSTFIX_OPERAND_END.match(content, start - 1):
                continue  # prefix negation
            window_start = max(0, start - 256)
            match = _RECEIVER_RE.search(content, window_start, start)
            if match is None:
                continue
            receiver_start = match.start(1)
            if receiver_start > 0 and content[receiver_start - 1:receiver_start] == b".":
                this_dot = _THIS_DOT_RE.search(content, window_start, receiver_start)
                if this_dot is None:
                    continue  # member access, e.g. widget.value!
                receiver_start = this_dot.start()
            if nullable is None:
                nullable = nullable_names(ctx.tree)
            name = match.group(1).decode("utf-8", errors="replace")
            if name not in nullable:
                continue
            yield self.diagnostic(
                ctx,
                receiver_start,
                node.end_byte,
                "Using null assertion operator (!) can cause runtime errors if value is null",
                "Use null-aware operators (?., ??) or null checks instead",
            )


RULES = [AvoidNullCheckOnNullableRule]
