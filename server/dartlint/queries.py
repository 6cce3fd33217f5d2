"""
Declarative tree-sitter queries over Dart syntax trees.

Patterns are S-expressions in tree-sitter query syntax. ``#eq?`` and
``#match?`` text predicates are evaluated by tree-sitter itself.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from tree_sitter import Node, Query, QueryCursor

from .errors import PatternError
from .parser import SyntaxTree, get_dart_language

logger = logging.getLogger(__name__)


# Pattern library. Rules refer to these by name.
PATTERNS: Dict[str, str] = {
    "classes": """
        (class_definition
          name: (identifier) @class.name) @class.def
    """,
    "methods": """
        [
          (method_signature) @method.def
          (function_signature) @function.def
        ]
    """,
    "fields": """
        (class_body
          (declaration
            [
              (initialized_identifier_list)
              (static_final_declaration_list)
            ] @field.names) @field.decl)
    """,
    "imports": """
        (import_or_export) @import.stmt
    """,
    "dynamic_types": """
        ((type_identifier) @type.name
          (#eq? @type.name "dynamic"))
    """,
    # The call's argument selector follows the callee directly, so
    # `logger.print(x)` (callee nested in a member selector) does not match.
    "print_calls": """
        (_
          (identifier) @function
          .
          (selector (argument_part) @args)
          (#eq? @function "print"))
    """,
    # A handler block follows its `catch (...)` clause or its `on Type`.
    "empty_catch": r"""
        (try_statement
          (catch_clause)
          .
          (block) @catch.body
          (#match? @catch.body "^\\{\\s*\\}$"))
        (try_statement
          (type_identifier)
          .
          (block) @catch.body
          (#match? @catch.body "^\\{\\s*\\}$"))
    """,
    "null_assertions": """
        (_
          (identifier) @null.operand
          .
          (selector "!" @null.assertion))
    """,
    "typed_variables": """
        (initialized_variable_definition
          (type_identifier) @var.type
          .
          (identifier) @var.name)
        (initialized_variable_definition
          (type_identifier) @var.type
          .
          (nullable_type)
          .
          (identifier) @var.name)
    """,
    "type_parameters": """
        (type_parameter
          (type_identifier) @param.name) @param.def
    """,
}


@dataclass(frozen=True)
class CompiledPattern:
    """A query compiled against the Dart grammar.

    ``query`` is None for empty patterns, which match nothing.
    """
    source: str
    query: Optional[Query] = None


@dataclass(frozen=True)
class QueryCapture:
    name: str
    node: Node
    text: str


@dataclass(frozen=True)
class QueryMatch:
    pattern_index: int
    captures: Tuple[QueryCapture, ...]

    def get(self, name: str) -> Optional[QueryCapture]:
        """First capture with the given name, if any."""
        for capture in self.captures:
            if capture.name == name:
                return capture
        return None


def compile_pattern(pattern: str) -> CompiledPattern:
    """Compile a query pattern.

    Raises:
        PatternError: if the pattern is not valid query syntax for Dart
    """
    if not pattern.strip():
        return CompiledPattern(source=pattern)
    try:
        query = Query(get_dart_language(), pattern)
    except Exception as e:
        raise PatternError(f"Invalid query pattern: {e}", pattern=pattern) from e
    return CompiledPattern(source=pattern, query=query)


def compile_library(names=None) -> Dict[str, CompiledPattern]:
    """Compile the named library patterns (all of them by default)."""
    compiled = {}
    for name in (names if names is not None else PATTERNS):
        if name not in PATTERNS:
            raise PatternError(f"Unknown library pattern '{name}'")
        compiled[name] = compile_pattern(PATTERNS[name])
        logger.debug(f"Compiled library pattern '{name}'")
    return compiled


def run_query(tree: SyntaxTree, pattern: CompiledPattern) -> List[QueryMatch]:
    """Execute a compiled pattern and return its matches in document order."""
    if pattern.query is None:
        return []
    cursor = QueryCursor(pattern.query)
    results = []
    for pattern_index, captures in cursor.matches(tree.root_node):
        flat = [
            QueryCapture(name=name, node=node, text=tree.text(node))
            for name, nodes in captures.items()
            for node in nodes
        ]
        flat.sort(key=lambda c: (c.node.start_byte, c.name))
        results.append(QueryMatch(pattern_index=pattern_index, captures=tuple(flat)))
    return results


def query(tree: SyntaxTree, pattern: Union[str, CompiledPattern]) -> List[QueryMatch]:
    """Compile (if needed) and execute a pattern against ``tree``."""
    if isinstance(pattern, str):
        pattern = compile_pattern(pattern)
    return run_query(tree, pattern)
