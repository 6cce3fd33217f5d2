"""
Rule: avoid_print

Calls to the top-level ``print`` function. Method calls such as
``logger.print(...)`` and declarations of a function named ``print`` are not
reported.
"""

from typing import Iterator, Optional

from tree_sitter import Node

from dartlint.types import Diagnostic, RuleContext, RuleMeta, StructuralRule

_DECLARATION_PARENTS = frozenset({
    "function_signature",
    "method_signature",
    "getter_signature",
    "setter_signature",
    "formal_parameter",
    "initialized_variable_definition",
    "initialized_identifier",
})


def _next_non_space(content: bytes, offset: int) -> bytes:
    while offset < len(content) and content[offset:offset + 1] in (b" ", b"\t", b"\r", b"\n"):
        offset += 1
    return content[offset:offset + 1]


def _prev_non_space(content: bytes, offset: int) -> bytes:
    offset -= 1
    while offset >= 0 and content[offset:offset + 1] in (b" ", b"\t", b"\r", b"\n"):
        offset -= 1
    return content[offset:offset + 1] if offset >= 0 else b""


def _call_end(content: bytes, node: Node) -> Optional[int]:
    """End of the argument list directly following ``node``, if any."""
    sibling = node.next_sibling
    if sibling is not None and content[sibling.start_byte:sibling.start_byte + 1] == b"(":
        return sibling.end_byte
    return None


class AvoidPrintRule(StructuralRule):
    """Flag calls to print()."""

    meta = RuleMeta(
        id="avoid_print",
        category="runtime",
        kind="structural",
        severity="info",
        description="Avoid print calls in production code",
    )

    def visit(self, ctx: RuleContext) -> Iterator[Diagnostic]:
        content = ctx.source.content
        for node in ctx.tree.nodes_of_type("identifier"):
            if ctx.tree.text(node) != "print":
                continue
            if _next_non_space(content, node.end_byte) != b"(":
                continue
            if _prev_non_space(content, node.start_byte) == b".":
                continue
            if node.parent is not None and node.parent.type in _DECLARATION_PARENTS:
                continue
            end = _call_end(content, node) or node.end_byte
            yield self.diagnostic(
                ctx,
                node.start_byte,
                end,
                "Avoid using 'print' in production code",
                "Use a proper logging library like logger or developer.log",
            )


RULES = [AvoidPrintRule]
