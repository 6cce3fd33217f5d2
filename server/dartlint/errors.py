"""
Exception types for the dartlint engine.

Only configuration-time faults (bad config values, duplicate rule ids,
invalid patterns, a missing grammar) are raised out of the engine. Anything
that goes wrong while analyzing a file is turned into a diagnostic instead.
"""

from typing import List, Optional


class DartLintError(Exception):
    """Base class for all dartlint errors."""


class ConfigError(DartLintError):
    """Invalid engine configuration."""


class DuplicateRuleError(ConfigError):
    """Two rules were registered with the same id."""

    def __init__(self, rule_id: str):
        super().__init__(f"Rule id '{rule_id}' is registered more than once")
        self.rule_id = rule_id


class PatternError(ConfigError):
    """A query pattern or rule regex failed to compile."""

    def __init__(self, message: str, pattern: Optional[str] = None):
        super().__init__(message)
        self.pattern = pattern


class ParserUnavailableError(DartLintError):
    """The Dart grammar could not be loaded."""


class AnalysisCancelled(DartLintError):
    """Raised by a run that was cancelled before aggregation finished.

    The partial diagnostics are unsorted and incomplete. Callers must discard
    them; they are attached only for debugging.
    """

    def __init__(self, partial: Optional[List] = None):
        super().__init__("Analysis run was cancelled")
        self.partial = list(partial or [])
