"""
Rule: private_field_underscore

Dart has no ``private`` keyword: privacy is expressed by a leading underscore.
Fields named as if they were private by some other convention (a ``private``
prefix such as ``privateToken`` or a trailing underscore such as ``count_``)
are flagged. Public names are never second-guessed.
"""

import re
from typing import Iterator, Optional

from dartlint.extract import extract_fields
from dartlint.types import Diagnostic, RuleContext, RuleMeta, StructuralRule

_PRIVATE_PREFIX_RE = re.compile(r"^private([A-Z0-9_].*)$")


def suggest_private_name(name: str) -> Optional[str]:
    """The ``_``-prefixed name for a field that looks private, else None."""
    if name.startswith("_"):
        return None
    match = _PRIVATE_PREFIX_RE.match(name)
    if match:
        rest = match.group(1).lstrip("_")
        if rest:
            return "_" + rest[0].lower() + rest[1:]
    if len(name) > 1 and name.endswith("_"):
        return "_" + name.rstrip("_")
    return None


class PrivateFieldUnderscoreRule(StructuralRule):
    """Flag fields that look private but lack a leading underscore."""

    meta = RuleMeta(
        id="private_field_underscore",
        category="style",
        kind="structural",
        severity="info",
        description="Private fields should start with an underscore",
    )

    def visit(self, ctx: RuleContext) -> Iterator[Diagnostic]:
        for field in extract_fields(ctx.tree):
            suggestion = suggest_private_name(field.name)
            if suggestion is None:
                continue
            yield self.diagnostic(
                ctx,
                field.start_byte,
                field.end_byte,
                f"Field '{field.name}' looks private but does not start with '_'",
                f"Rename to '{suggestion}'",
            )


RULES = [PrivateFieldUnderscoreRule]
