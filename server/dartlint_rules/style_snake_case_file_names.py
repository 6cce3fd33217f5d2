"""
Rule: snake_case_file_names

Dart file names should be lower snake_case (``user_profile.dart``).
"""

import os.path
from typing import Iterator

from dartlint.types import Diagnostic, PatternRule, RuleContext, RuleMeta

from .naming import to_snake_case


class SnakeCaseFileNamesRule(PatternRule):
    """Flag Dart files whose base name is not snake_case."""

    meta = RuleMeta(
        id="snake_case_file_names",
        category="style",
        kind="pattern",
        severity="warning",
        description="File names should use snake_case",
    )

    patterns = {"file_name": r"^[a-z][a-z0-9_]*$"}

    def visit(self, ctx: RuleContext) -> Iterator[Diagnostic]:
        base = os.path.basename(ctx.file_path)
        if not base.endswith(".dart"):
            return
        stem = base[:-len(".dart")]
        if not stem or ctx.regexes["file_name"].match(stem):
            return
        yield self.diagnostic_at(
            ctx, 1, 1, 1, 1,
            f"File name '{base}' should use snake_case",
            f"Rename file to '{to_snake_case(stem)}.dart'",
        )


RULES = [SnakeCaseFileNamesRule]
