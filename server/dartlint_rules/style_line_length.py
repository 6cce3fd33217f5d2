"""
Rule: line_length

Flags lines longer than ``max_line_length`` characters (120 by default).
"""

from typing import Iterator

from dartlint.config import DEFAULT_MAX_LINE_LENGTH
from dartlint.types import Diagnostic, PatternRule, RuleContext, RuleMeta


class LineLengthRule(PatternRule):
    """Flag lines exceeding the configured maximum length."""

    meta = RuleMeta(
        id="line_length",
        category="style",
        kind="pattern",
        severity="info",
        description=f"Lines should not exceed {DEFAULT_MAX_LINE_LENGTH} characters",
    )

    patterns = {"line": r"(?m)^[^\n]*$"}

    def visit(self, ctx: RuleContext) -> Iterator[Diagnostic]:
        max_length = ctx.config.get("max_line_length", DEFAULT_MAX_LINE_LENGTH)
        for match in ctx.regexes["line"].finditer(ctx.text):
            length = len(match.group(0).rstrip("\r"))
            if length <= max_length:
                continue
            line, _ = ctx.source.offset_to_linecol(match.start())
            yield self.diagnostic_at(
                ctx, line, max_length + 1, line, length + 1,
                f"Line exceeds maximum length of {max_length} characters (actual: {length})",
                "Consider breaking this line into multiple lines",
            )


RULES = [LineLengthRule]
