"""
Rule: avoid_empty_catch

A ``catch``/``on`` handler whose body has no statements silently swallows the
exception. Comments alone do not count as handling it.
"""

from typing import Dict, Iterator, List

from tree_sitter import Node

from dartlint.types import Diagnostic, RuleContext, RuleMeta, StructuralRule

COMMENT_TYPES = frozenset({"comment", "documentation_comment", "block_comment"})
_HANDLER_BOUNDARIES = frozenset({"block", "finally_clause", "try"})


def is_empty_block(block: Node) -> bool:
    return all(child.type in COMMENT_TYPES for child in block.named_children)


def handler_bodies(try_node: Node) -> List[Node]:
    """Bodies of the catch/on handlers of a try statement.

    The first block child is the guarded body; every later block child
    belongs to a handler. Grammars that nest the body inside the catch clause
    are covered too.
    """
    bodies: Dict[int, Node] = {}
    blocks = [child for child in try_node.children if child.type == "block"]
    for block in blocks[1:]:
        previous = block.prev_sibling
        while previous is not None and previous.type in COMMENT_TYPES:
            previous = previous.prev_sibling
        if previous is not None and previous.type == "finally":
            continue
        bodies[block.start_byte] = block
    for child in try_node.children:
        if child.type in ("block", "finally_clause") or not child.is_named:
            continue
        body = child.child_by_field_name("body")
        if body is None:
            body = next((c for c in child.children if c.type == "block"), None)
        if body is not None:
            bodies[body.start_byte] = body
    return [bodies[key] for key in sorted(bodies)]


def handler_start(body: Node) -> int:
    """Byte offset where the handler owning ``body`` begins (its on/catch keyword)."""
    start = body.start_byte
    sibling = body.prev_sibling
    while sibling is not None and sibling.type not in _HANDLER_BOUNDARIES:
        start = sibling.start_byte
        sibling = sibling.prev_sibling
    if body.parent is not None and body.parent.type != "try_statement":
        start = min(start, body.parent.start_byte)
    return start


class AvoidEmptyCatchRule(StructuralRule):
    """Flag catch blocks with no statements."""

    meta = RuleMeta(
        id="avoid_empty_catch",
        category="runtime",
        kind="structural",
        severity="error",
        description="Catch blocks should not be empty",
    )

    def visit(self, ctx: RuleContext) -> Iterator[Diagnostic]:
        for try_node in ctx.tree.nodes_of_type("try_statement"):
            for body in handler_bodies(try_node):
                if not is_empty_block(body):
                    continue
                yield self.diagnostic(
                    ctx,
                    handler_start(body),
                    body.end_byte,
                    "Empty catch block swallows exceptions silently",
                    "Handle the exception or at least log it",
                )


RULES = [AvoidEmptyCatchRule]
