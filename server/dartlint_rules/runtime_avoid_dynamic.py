"""
Rule: avoid_dynamic

``dynamic`` switches off static checking for everything flowing through it.
"""

from typing import Iterator

from dartlint.extract import extract_type_annotations
from dartlint.types import Diagnostic, RuleContext, RuleMeta, StructuralRule


class AvoidDynamicRule(StructuralRule):
    """Flag type annotations that use ``dynamic``."""

    meta = RuleMeta(
        id="avoid_dynamic",
        category="runtime",
        kind="structural",
        severity="warning",
        description="Avoid the dynamic type",
    )

    def visit(self, ctx: RuleContext) -> Iterator[Diagnostic]:
        for annotation in extract_type_annotations(ctx.tree):
            if annotation.name != "dynamic":
                continue
            yield self.diagnostic(
                ctx,
                annotation.start_byte,
                annotation.end_byte,
                "Avoid using 'dynamic' type as it bypasses type safety",
                "Use a specific type or Object? instead",
            )


RULES = [AvoidDynamicRule]
