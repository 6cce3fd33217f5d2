"""
Rule: camel_case_class_names

Class names must start with an uppercase ASCII letter. Library-private classes
are not exempt: `_Foo` is reported and renamed to `Foo`.
"""

from typing import Iterator

from dartlint.types import Diagnostic, RuleContext, RuleMeta, StructuralRule

from .naming import to_camel_case


class CamelCaseClassNamesRule(StructuralRule):
    """Flag class names that do not start with an uppercase letter."""

    meta = RuleMeta(
        id="camel_case_class_names",
        category="style",
        kind="structural",
        severity="warning",
        description="Class names should use CamelCase",
    )

    queries = ("classes",)

    def visit(self, ctx: RuleContext) -> Iterator[Diagnostic]:
        for match in ctx.query("classes"):
            name = match.get("class.name")
            if name is None:
                continue
            if "A" <= name.text[0] <= "Z":
                continue
            yield self.diagnostic(
                ctx,
                name.node.start_byte,
                name.node.end_byte,
                f"Class name '{name.text}' should use CamelCase (start with uppercase)",
                f"Rename to '{to_camel_case(name.text)}'",
            )


RULES = [CamelCaseClassNamesRule]
