"""
Dart parsing on top of tree-sitter.

The Dart grammar comes from tree-sitter-language-pack. The ``Language`` object
is loaded once and shared read-only; every parse builds its own ``Parser`` so
independent buffers can be parsed from several threads at once.
"""

import logging
from functools import lru_cache
from typing import Iterator, List, Optional, Union

import tree_sitter
from tree_sitter import Language, Node, Parser
from tree_sitter_language_pack import get_language

from .errors import ParserUnavailableError
from .types import SourceBuffer

logger = logging.getLogger(__name__)

DART_LANGUAGE_NAME = "dart"


@lru_cache(maxsize=1)
def get_dart_language() -> Language:
    """Load the Dart grammar, raising ParserUnavailableError if it is missing."""
    try:
        language = get_language(DART_LANGUAGE_NAME)
    except Exception as e:
        raise ParserUnavailableError(f"Dart grammar is not available: {e}") from e
    logger.debug("Loaded tree-sitter Dart grammar")
    return language


def new_parser() -> Parser:
    return Parser(get_dart_language())


class SyntaxTree:
    """A concrete syntax tree for one source buffer.

    The tree may contain error nodes; it is produced for any input. Nodes
    handed out by this class keep the underlying tree alive, and the typed
    views built from them keep a reference back to this object.
    """

    def __init__(self, source: SourceBuffer, tree: tree_sitter.Tree):
        self.source = source
        self.tree = tree

    @property
    def root_node(self) -> Node:
        return self.tree.root_node

    @property
    def path(self) -> str:
        return self.source.path

    def has_error(self) -> bool:
        return self.root_node.has_error

    def text(self, node: Node) -> str:
        return self.source.slice(node.start_byte, node.end_byte)

    def walk(self, node: Optional[Node] = None) -> Iterator[Node]:
        """Pre-order traversal over all nodes, named and anonymous."""
        stack: List[Node] = [node if node is not None else self.root_node]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    def nodes_of_type(self, *types: str) -> Iterator[Node]:
        wanted = set(types)
        for node in self.walk():
            if node.type in wanted:
                yield node

    def error_nodes(self) -> List[Node]:
        return [node for node in self.walk() if node.is_error or node.is_missing]

    def __repr__(self) -> str:
        return f"SyntaxTree(path={self.path!r}, has_error={self.has_error()})"


def _as_buffer(source: Union[bytes, str, SourceBuffer], path: str) -> SourceBuffer:
    if isinstance(source, SourceBuffer):
        return source
    if isinstance(source, str):
        return SourceBuffer.from_text(source, path)
    return SourceBuffer(path=path, content=bytes(source))


def parse(source: Union[bytes, str, SourceBuffer], path: str = "<memory>",
          old_tree: Optional[tree_sitter.Tree] = None) -> SyntaxTree:
    """Parse Dart source into a SyntaxTree.

    Never raises for malformed input; syntax errors show up as error nodes.

    Args:
        source: Raw bytes, text, or an existing SourceBuffer
        path: File path recorded on the buffer when ``source`` is not one
        old_tree: An edited previous tree to reuse for incremental parsing

    Returns:
        SyntaxTree owning the parsed tree
    """
    buffer = _as_buffer(source, path)
    parser = new_parser()
    if old_tree is not None:
        tree = parser.parse(buffer.content, old_tree)
    else:
        tree = parser.parse(buffer.content)
    if tree.root_node.has_error:
        logger.debug(f"Parsed {buffer.path} with syntax errors")
    return SyntaxTree(buffer, tree)
