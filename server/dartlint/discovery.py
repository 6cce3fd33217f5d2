"""
Discovery of Dart source files.

Walks a path for ``.dart`` files, skipping tool and build output directories
and anything matched by the configured glob exclusions.
"""

import fnmatch
import logging
import os
from typing import FrozenSet, Iterable, List, Optional

from .types import SourceBuffer

logger = logging.getLogger(__name__)

DART_EXTENSION = ".dart"

# Directories that never hold sources worth analyzing
EXCLUDED_DIRS: FrozenSet[str] = frozenset([
    ".dart_tool",
    "build",
    ".pub",
    ".pub-cache",
    "packages",
    ".git",
    ".idea",
    ".vscode",
])


def _normalize(path: str) -> str:
    return path.replace(os.sep, "/")


def is_excluded(rel_path: str, exclude_patterns: Iterable[str]) -> bool:
    """Check a path relative to the analysis root against glob patterns.

    ``dir/**`` matches the directory itself and everything below it.
    """
    rel_path = _normalize(rel_path)
    for pattern in exclude_patterns:
        pattern = _normalize(pattern)
        if fnmatch.fnmatch(rel_path, pattern):
            return True
        if pattern.endswith("/**"):
            prefix = pattern[:-3]
            if rel_path == prefix or rel_path.startswith(prefix + "/"):
                return True
    return False


def discover_dart_files(root: str, exclude_patterns: Optional[Iterable[str]] = None) -> List[str]:
    """
    Collect Dart files under ``root``.

    Args:
        root: A directory to walk, or a single file
        exclude_patterns: Glob patterns relative to ``root``

    Returns:
        Sorted absolute paths
    """
    patterns = list(exclude_patterns or [])
    root = os.path.abspath(root)

    if os.path.isfile(root):
        return [root] if root.endswith(DART_EXTENSION) else []
    if not os.path.isdir(root):
        logger.warning(f"Path does not exist: {root}")
        return []

    files = []
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)
        kept = []
        for d in dirnames:
            rel = d if rel_dir == "." else os.path.join(rel_dir, d)
            if d in EXCLUDED_DIRS or is_excluded(rel, patterns):
                logger.debug(f"Skipping directory {rel}")
                continue
            kept.append(d)
        dirnames[:] = kept

        for filename in filenames:
            if not filename.endswith(DART_EXTENSION):
                continue
            rel = filename if rel_dir == "." else os.path.join(rel_dir, filename)
            if is_excluded(rel, patterns):
                continue
            files.append(os.path.join(dirpath, filename))

    return sorted(files)


def load_sources(paths: Iterable[str]) -> List[SourceBuffer]:
    """Read files into SourceBuffers; unreadable files keep their read error."""
    buffers = []
    for path in paths:
        buffer = SourceBuffer.from_path(path)
        if buffer.read_error:
            logger.warning(f"Could not read {buffer.path}: {buffer.read_error}")
        buffers.append(buffer)
    return buffers
