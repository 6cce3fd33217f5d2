"""
Identifier case conversions shared by the naming rules.
"""

import re

_WORD_SPLIT_RE = re.compile(r"[_\-\s]+")


def to_camel_case(name: str) -> str:
    """``my_class`` / ``_myClass`` -> ``MyClass``."""
    parts = [p for p in _WORD_SPLIT_RE.split(name) if p]
    return "".join(p[0].upper() + p[1:] for p in parts)


def to_snake_case(name: str) -> str:
    """``MyFile`` / ``my-file`` -> ``my_file``."""
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = _WORD_SPLIT_RE.sub("_", name)
    return name.strip("_").lower()
