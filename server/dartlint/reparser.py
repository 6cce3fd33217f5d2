"""
Incremental re-parsing for editor-style sessions.

An IncrementalReparser keeps the last tree and source of one editing context.
Each reparse works on a copy of the previous tree, so trees already handed out
are never mutated.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from .parser import SyntaxTree, parse
from .types import Point, SourceBuffer

logger = logging.getLogger(__name__)

SourceLike = Union[bytes, str, SourceBuffer]


def _content(source: SourceLike) -> bytes:
    if isinstance(source, SourceBuffer):
        return source.content
    if isinstance(source, str):
        return source.encode("utf-8")
    return bytes(source)


def _advance(point: Point, inserted: bytes) -> Point:
    """The point reached after writing ``inserted`` starting at ``point``."""
    newlines = inserted.count(b"\n")
    if newlines == 0:
        return point[0], point[1] + len(inserted)
    return point[0] + newlines, len(inserted) - inserted.rfind(b"\n") - 1


@dataclass(frozen=True)
class Edit:
    """A single text change in tree-sitter terms.

    Byte offsets refer to the source before the edit (start, old end) and
    after it (new end). Points are (row, byte_column), 0-based.
    """
    start_byte: int
    old_end_byte: int
    new_end_byte: int
    start_point: Point
    old_end_point: Point
    new_end_point: Point

    @classmethod
    def replace(cls, source: SourceLike, start_byte: int, end_byte: int,
                text: Union[str, bytes]) -> "Edit":
        """Edit replacing ``source[start_byte:end_byte]`` with ``text``."""
        content = _content(source)
        inserted = text.encode("utf-8") if isinstance(text, str) else text
        buffer = SourceBuffer(path="<edit>", content=content)
        start_point = buffer.byte_to_point(start_byte)
        return cls(
            start_byte=start_byte,
            old_end_byte=end_byte,
            new_end_byte=start_byte + len(inserted),
            start_point=start_point,
            old_end_point=buffer.byte_to_point(end_byte),
            new_end_point=_advance(start_point, inserted),
        )

    @classmethod
    def insert(cls, source: SourceLike, offset: int, text: Union[str, bytes]) -> "Edit":
        return cls.replace(source, offset, offset, text)

    @classmethod
    def delete(cls, source: SourceLike, start_byte: int, end_byte: int) -> "Edit":
        return cls.replace(source, start_byte, end_byte, b"")


def apply_edit(source: SourceLike, start_byte: int, end_byte: int,
               text: Union[str, bytes]) -> Tuple[Edit, bytes]:
    """Splice ``text`` into ``source`` and return the edit with the new content."""
    content = _content(source)
    inserted = text.encode("utf-8") if isinstance(text, str) else text
    edit = Edit.replace(content, start_byte, end_byte, inserted)
    return edit, content[:start_byte] + inserted + content[end_byte:]


class IncrementalReparser:
    """Holds one (tree, source) session and re-parses it after edits."""

    def __init__(self, path: str = "<memory>"):
        self.path = path
        self._tree: Optional[SyntaxTree] = None

    @property
    def tree(self) -> Optional[SyntaxTree]:
        return self._tree

    @property
    def source(self) -> Optional[SourceBuffer]:
        return self._tree.source if self._tree is not None else None

    def parse(self, source: SourceLike) -> SyntaxTree:
        """Start (or restart) the session with a full parse."""
        self._tree = parse(self._buffer(source))
        return self._tree

    def reparse(self, edit: Edit, new_source: SourceLike) -> SyntaxTree:
        return self.reparse_batch([edit], new_source)

    def reparse_batch(self, edits: Iterable[Edit], new_source: SourceLike) -> SyntaxTree:
        """Apply edits in order, then re-parse once.

        Each edit is expressed against the text produced by the edits before
        it in the batch. Without a previous tree this is a full parse.
        """
        buffer = self._buffer(new_source)
        if self._tree is None:
            logger.debug(f"No previous tree for {self.path}, doing a full parse")
            self._tree = parse(buffer)
            return self._tree

        old_tree = self._tree.tree.copy()
        for edit in edits:
            old_tree.edit(
                start_byte=edit.start_byte,
                old_end_byte=edit.old_end_byte,
                new_end_byte=edit.new_end_byte,
                start_point=edit.start_point,
                old_end_point=edit.old_end_point,
                new_end_point=edit.new_end_point,
            )
        self._tree = parse(buffer, old_tree=old_tree)
        return self._tree

    def reset(self) -> None:
        self._tree = None

    def _buffer(self, source: SourceLike) -> SourceBuffer:
        if isinstance(source, SourceBuffer):
            self.path = source.path
            return source
        return SourceBuffer(path=self.path, content=_content(source))
