"""
dartlint rules package.

Each module defines one rule class and exposes it in a module-level ``RULES``
list. ``get_default_rules`` instantiates every bundled rule in a fixed order.

To add a rule:
1. Create a module here (``style_*`` or ``runtime_*``)
2. Subclass ``PatternRule`` or ``StructuralRule`` and set ``meta``
3. List the class in the module's ``RULES`` and add the module to
   ``RULE_MODULES`` below
"""

from typing import List

from dartlint.types import Rule

from . import (
    runtime_avoid_dynamic,
    runtime_avoid_empty_catch,
    runtime_avoid_null_check_on_nullable,
    runtime_avoid_print,
    runtime_unused_import,
    style_camel_case_class_names,
    style_line_length,
    style_private_field_underscore,
    style_snake_case_file_names,
)

RULE_MODULES = [
    style_camel_case_class_names,
    style_snake_case_file_names,
    style_private_field_underscore,
    style_line_length,
    runtime_avoid_dynamic,
    runtime_avoid_empty_catch,
    runtime_unused_import,
    runtime_avoid_print,
    runtime_avoid_null_check_on_nullable,
]


def get_default_rules() -> List[Rule]:
    """Fresh instances of all bundled rules."""
    return [rule_class() for module in RULE_MODULES for rule_class in module.RULES]


def get_style_rules() -> List[Rule]:
    return [rule for rule in get_default_rules() if rule.meta.category == "style"]


def get_runtime_rules() -> List[Rule]:
    return [rule for rule in get_default_rules() if rule.meta.category == "runtime"]
