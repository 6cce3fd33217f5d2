"""
Registry of analysis rules.

The registry is built once at startup and never changes afterwards. Building
it validates rule metadata, rejects duplicate ids and compiles every regex the
rules declare along with the whole query library, so all of those failures
surface before any file is analyzed.
"""

import fnmatch
import logging
import re
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from .errors import ConfigError, DuplicateRuleError, PatternError
from .queries import CompiledPattern, compile_library
from .types import CATEGORIES, RULE_KINDS, SEVERITIES, PatternRule, Rule, RuleDescriptor

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Immutable set of rules with their compiled patterns."""

    def __init__(self, rules: Iterable[Rule]):
        ordered: List[Rule] = []
        index: Dict[str, Rule] = {}
        for rule in rules:
            self._validate_meta(rule)
            if rule.meta.id in index:
                raise DuplicateRuleError(rule.meta.id)
            index[rule.meta.id] = rule
            ordered.append(rule)

        self._rules: Tuple[Rule, ...] = tuple(ordered)
        self._rule_index = index
        self._regexes: Dict[str, Dict[str, Pattern]] = {
            rule.meta.id: self._compile_regexes(rule) for rule in self._rules
        }

        self._queries: Dict[str, CompiledPattern] = compile_library()
        for rule in self._rules:
            for name in getattr(rule, "queries", ()):
                if name not in self._queries:
                    raise PatternError(f"Rule '{rule.meta.id}' names unknown library pattern '{name}'")
        logger.debug(f"Built rule registry with {len(self._rules)} rules, "
                     f"{len(self._queries)} compiled queries")

    @staticmethod
    def _validate_meta(rule: Rule) -> None:
        meta = getattr(rule, "meta", None)
        if meta is None or not meta.id:
            raise ConfigError(f"Rule {rule!r} has no id")
        if meta.category not in CATEGORIES:
            raise ConfigError(f"Rule '{meta.id}' has unknown category '{meta.category}'")
        if meta.kind not in RULE_KINDS:
            raise ConfigError(f"Rule '{meta.id}' has unknown kind '{meta.kind}'")
        if meta.severity not in SEVERITIES:
            raise ConfigError(f"Rule '{meta.id}' has unknown severity '{meta.severity}'")
        if meta.kind == "pattern" and getattr(rule, "queries", ()):
            raise ConfigError(f"Pattern rule '{meta.id}' cannot declare tree queries")

    @staticmethod
    def _compile_regexes(rule: Rule) -> Dict[str, Pattern]:
        if not isinstance(rule, PatternRule):
            return {}
        compiled = {}
        for name, source in rule.patterns.items():
            try:
                compiled[name] = re.compile(source)
            except re.error as e:
                raise PatternError(
                    f"Rule '{rule.meta.id}' pattern '{name}' is invalid: {e}", pattern=source
                ) from e
        return compiled

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._rule_index

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        """Get rule by id."""
        return self._rule_index.get(rule_id)

    def get_all_rules(self) -> List[Rule]:
        return list(self._rules)

    def get_rule_ids(self) -> List[str]:
        return [rule.meta.id for rule in self._rules]

    def get_rules_by_category(self, category: str) -> List[Rule]:
        return [rule for rule in self._rules if rule.meta.category == category]

    def get_rules(self, patterns: Optional[List[str]] = None) -> List[Rule]:
        """Get rules whose ids match any of the glob patterns (all if None)."""
        if patterns is None:
            return self.get_all_rules()
        return [
            rule for rule in self._rules
            if any(fnmatch.fnmatch(rule.meta.id, pattern) for pattern in patterns)
        ]

    def enabled_rules(self, config) -> List[Rule]:
        """Rules left enabled by an EngineConfig, in registration order."""
        return [
            rule for rule in self._rules
            if config.is_rule_enabled(rule.meta.id, rule.meta.category)
        ]

    def describe(self, config) -> List[RuleDescriptor]:
        return [
            RuleDescriptor(
                id=rule.meta.id,
                category=rule.meta.category,
                kind=rule.meta.kind,
                severity=rule.meta.severity,
                enabled=config.is_rule_enabled(rule.meta.id, rule.meta.category),
                description=rule.meta.description,
            )
            for rule in self._rules
        ]

    def regexes_for(self, rule: Rule) -> Dict[str, Pattern]:
        return self._regexes.get(rule.meta.id, {})

    def queries_for(self, rule: Rule) -> Dict[str, CompiledPattern]:
        return {name: self._queries[name] for name in getattr(rule, "queries", ())}


def build_registry(rules: Optional[Iterable[Rule]] = None) -> RuleRegistry:
    """Build the registry, defaulting to the bundled Dart rules."""
    if rules is None:
        from dartlint_rules import get_default_rules
        rules = get_default_rules()
    return RuleRegistry(rules)
