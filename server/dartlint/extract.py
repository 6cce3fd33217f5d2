"""
Typed extraction over Dart syntax trees.

Each ``extract_*`` function walks the tree once and returns a fresh list of
frozen views. Views keep the node and the owning SyntaxTree, so they cannot
outlive the tree they were read from; equality ignores both and compares only
the derived attributes, which lets views from a re-parsed tree be compared
with views from a fresh parse.

On trees with syntax errors the functions return whatever constructs are still
recognizable and never raise.
"""

import re
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

from tree_sitter import Node

from .parser import SyntaxTree

_IDENT_RE = re.compile(r"[A-Za-z_$][\w$]*")
_COMMENT_RE = re.compile(r"//[^\n]*|/\*.*?\*/", re.S)
_METADATA_RE = re.compile(r"@[\w$.]+(?:\s*\([^()]*\))?")
_MODIFIER_RE = re.compile(r"(static|final|const|late|covariant|external|var)\b\s*")

_SIGNATURE_KINDS = {
    "function_signature": "function",
    "getter_signature": "getter",
    "setter_signature": "setter",
}
_DECLARATOR_LISTS = frozenset({
    "initialized_identifier_list",
    "static_final_declaration_list",
    "identifier_list",
})
_DECLARATORS = frozenset({"initialized_identifier", "static_final_declaration"})
_COMMENT_KINDS = frozenset({"comment", "documentation_comment", "block_comment"})
_MEMBER_SCOPES = frozenset({"class_body", "extension_body", "enum_body"})
_SCOPE_BARRIERS = frozenset({"function_body", "block", "program", "lambda_expression"})

EXPRESSION_KINDS = frozenset({
    "binary_expression",
    "additive_expression",
    "multiplicative_expression",
    "relational_expression",
    "equality_expression",
    "logical_and_expression",
    "logical_or_expression",
    "if_null_expression",
    "unary_expression",
    "assignment_expression",
    "conditional_expression",
    "throw_expression",
    "cascade_expression",
    "is_expression",
    "as_expression",
    "postfix_expression",
    "selector_expression",
    "parenthesized_expression",
    "list_literal",
    "map_literal",
    "set_or_map_literal",
    "string_literal",
    "decimal_integer_literal",
    "hex_integer_literal",
    "decimal_floating_point_literal",
    "true",
    "false",
    "null_literal",
})


@dataclass(frozen=True)
class ClassView:
    name: str
    start_byte: int
    end_byte: int
    name_start_byte: int
    name_end_byte: int
    is_abstract: bool = False
    superclass: Optional[str] = None
    type_parameters: Tuple[str, ...] = ()
    node: Node = field(default=None, compare=False, repr=False)
    tree: SyntaxTree = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class MethodView:
    name: str
    kind: str  # "function", "getter" or "setter"
    start_byte: int
    end_byte: int
    return_type: Optional[str] = None
    parameters: Optional[str] = None
    is_static: bool = False
    enclosing_class: Optional[str] = None
    node: Node = field(default=None, compare=False, repr=False)
    tree: SyntaxTree = field(default=None, compare=False, repr=False)

    @property
    def is_top_level(self) -> bool:
        return self.enclosing_class is None


@dataclass(frozen=True)
class ImportView:
    uri: str
    directive: str  # "import" or "export"
    start_byte: int
    end_byte: int
    alias: Optional[str] = None
    show: Tuple[str, ...] = ()
    hide: Tuple[str, ...] = ()
    is_deferred: bool = False
    node: Node = field(default=None, compare=False, repr=False)
    tree: SyntaxTree = field(default=None, compare=False, repr=False)

    @property
    def stem(self) -> str:
        """The last path segment of the URI without the ``.dart`` suffix."""
        tail = self.uri.rsplit("/", 1)[-1]
        tail = tail.rsplit(":", 1)[-1]
        if tail.endswith(".dart"):
            tail = tail[:-len(".dart")]
        return tail


@dataclass(frozen=True)
class FieldView:
    name: str
    start_byte: int
    end_byte: int
    type_annotation: Optional[str] = None
    modifiers: FrozenSet[str] = frozenset()
    enclosing_class: Optional[str] = None
    node: Node = field(default=None, compare=False, repr=False)
    tree: SyntaxTree = field(default=None, compare=False, repr=False)

    @property
    def is_nullable(self) -> bool:
        return bool(self.type_annotation) and self.type_annotation.endswith("?")

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def is_final(self) -> bool:
        return "final" in self.modifiers

    @property
    def is_const(self) -> bool:
        return "const" in self.modifiers

    @property
    def is_late(self) -> bool:
        return "late" in self.modifiers


@dataclass(frozen=True)
class VariableView:
    name: str
    scope: str  # "local" or "top_level"
    start_byte: int
    end_byte: int
    type_annotation: Optional[str] = None
    modifiers: FrozenSet[str] = frozenset()
    node: Node = field(default=None, compare=False, repr=False)
    tree: SyntaxTree = field(default=None, compare=False, repr=False)

    @property
    def is_nullable(self) -> bool:
        return bool(self.type_annotation) and self.type_annotation.endswith("?")

    @property
    def is_final(self) -> bool:
        return "final" in self.modifiers

    @property
    def is_const(self) -> bool:
        return "const" in self.modifiers

    @property
    def is_late(self) -> bool:
        return "late" in self.modifiers


@dataclass(frozen=True)
class TypeAnnotationView:
    """One type name in an annotation position.

    ``end_byte`` is the end of the type name; ``full_end_byte`` also covers the
    generic arguments and the nullable marker.
    """
    name: str
    start_byte: int
    end_byte: int
    full_end_byte: int
    type_arguments: Tuple[str, ...] = ()
    is_nullable: bool = False
    is_type_argument: bool = False
    node: Node = field(default=None, compare=False, repr=False)
    tree: SyntaxTree = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class TypeParameterView:
    name: str
    start_byte: int
    end_byte: int
    bound: Optional[str] = None
    node: Node = field(default=None, compare=False, repr=False)
    tree: SyntaxTree = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ExpressionView:
    kind: str
    text: str
    start_byte: int
    end_byte: int
    node: Node = field(default=None, compare=False, repr=False)
    tree: SyntaxTree = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    start_byte: int
    end_byte: int
    start_point: Tuple[int, int]
    end_point: Tuple[int, int]


# Helpers

def _first_child_of_type(node: Node, *types: str) -> Optional[Node]:
    for child in node.children:
        if child.type in types:
            return child
    return None


def _name_node(node: Node) -> Optional[Node]:
    name = node.child_by_field_name("name")
    if name is not None:
        return name
    return _first_child_of_type(node, "identifier", "type_identifier")


def _has_child_text(tree: SyntaxTree, node: Node, word: str) -> bool:
    return any(child.type == word or tree.text(child) == word for child in node.children)


def _split_prefix(prefix: str) -> Tuple[FrozenSet[str], Optional[str]]:
    """Split the text before a declared name into modifiers and a type."""
    prefix = _COMMENT_RE.sub(" ", prefix)
    prefix = _METADATA_RE.sub(" ", prefix).strip()
    modifiers = set()
    while True:
        match = _MODIFIER_RE.match(prefix)
        if match is None:
            break
        modifiers.add(match.group(1))
        prefix = prefix[match.end():]
    type_text = prefix.strip() or None
    return frozenset(modifiers), type_text


def _split_type_arguments(text: str) -> Tuple[str, ...]:
    """Split ``<A, Map<B, C>>`` into its top-level arguments."""
    inner = text.strip()
    if inner.startswith("<") and inner.endswith(">"):
        inner = inner[1:-1]
    args, depth, current = [], 0, []
    for ch in inner:
        if ch in "<([{":
            depth += 1
        elif ch in ">)]}":
            depth -= 1
        if ch == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    if "".join(current).strip():
        args.append("".join(current).strip())
    return tuple(args)


def _enclosing_member_scope(node: Node) -> Optional[Node]:
    """The class-like body directly containing ``node``, if any."""
    parent = node.parent
    while parent is not None:
        if parent.type in _MEMBER_SCOPES:
            return parent
        if parent.type in _SCOPE_BARRIERS:
            return None
        parent = parent.parent
    return None


def _enclosing_class_name(tree: SyntaxTree, node: Node) -> Optional[str]:
    scope = _enclosing_member_scope(node)
    if scope is None or scope.parent is None:
        return None
    name = _name_node(scope.parent)
    return tree.text(name) if name is not None else None


def _list_names(node: Node) -> List[Node]:
    names = []
    for item in node.named_children:
        if item.type == "identifier":
            names.append(item)
        elif item.type in _DECLARATORS:
            ident = _name_node(item)
            if ident is not None:
                names.append(ident)
    return names


def _declared_names(node: Node) -> List[Node]:
    """Identifier nodes declared by a field or top-level variable declaration."""
    names = []
    for child in node.named_children:
        if child.type in _DECLARATOR_LISTS:
            names.extend(_list_names(child))
        elif child.type in _DECLARATORS:
            ident = _name_node(child)
            if ident is not None:
                names.append(ident)
    return names


def _is_signature_container(node: Node) -> bool:
    return any(child.type.endswith("_signature") for child in node.named_children)


def _program_prefix_start(tree: SyntaxTree, node: Node) -> int:
    """Start of the modifiers and type written before a program-level declarator list.

    Some grammar versions put ``String? title;`` directly under ``program`` as
    sibling type nodes followed by the list, with no wrapping definition node.
    """
    start = node.start_byte
    sibling = node.prev_sibling
    while sibling is not None:
        if sibling.type == ";" or sibling.type in _DECLARATOR_LISTS or sibling.type in _COMMENT_KINDS:
            break
        if tree.text(sibling).rstrip().endswith((";", "}")):
            break
        start = sibling.start_byte
        sibling = sibling.prev_sibling
    return start


# Extraction

def extract_classes(tree: SyntaxTree) -> List[ClassView]:
    classes = []
    for node in tree.nodes_of_type("class_definition"):
        name = _name_node(node)
        if name is None:
            continue
        superclass = node.child_by_field_name("superclass")
        if superclass is None:
            superclass = _first_child_of_type(node, "superclass")
        super_text = None
        if superclass is not None:
            super_text = re.sub(r"^\s*extends\s+", "", tree.text(superclass)).strip() or None
        type_params = _first_child_of_type(node, "type_parameters")
        param_names: Tuple[str, ...] = ()
        if type_params is not None:
            param_names = tuple(view.name for view in _type_parameters_in(tree, type_params))
        classes.append(ClassView(
            name=tree.text(name),
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            name_start_byte=name.start_byte,
            name_end_byte=name.end_byte,
            is_abstract=any(
                child.type == "abstract" for child in node.children
                if child.start_byte < name.start_byte
            ),
            superclass=super_text,
            type_parameters=param_names,
            node=node,
            tree=tree,
        ))
    return classes


def extract_methods(tree: SyntaxTree) -> List[MethodView]:
    """Functions, methods, getters and setters, top-level or in a class."""
    methods = []
    for node in tree.nodes_of_type(*_SIGNATURE_KINDS):
        name = _name_node(node)
        if name is None:
            continue
        prefix = tree.source.slice(node.start_byte, name.start_byte)
        prefix = re.sub(r"\b(get|set)\s*$", "", prefix.rstrip())
        modifiers, return_type = _split_prefix(prefix)
        container = node.parent
        is_static = "static" in modifiers or (
            container is not None
            and container.type in ("method_signature", "declaration")
            and _has_child_text(tree, container, "static")
        )
        params = _first_child_of_type(node, "formal_parameter_list")
        methods.append(MethodView(
            name=tree.text(name),
            kind=_SIGNATURE_KINDS[node.type],
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            return_type=return_type,
            parameters=tree.text(params) if params is not None else None,
            is_static=is_static,
            enclosing_class=_enclosing_class_name(tree, node),
            node=node,
            tree=tree,
        ))
    return methods


_DIRECTIVE_RE = re.compile(r"\b(import|export)\s+(['\"])(.*?)\2", re.S)
_CONFIGURATION_RE = re.compile(r"\bif\s*\([^)]*\)\s*(['\"]).*?\1", re.S)


def extract_imports(tree: SyntaxTree) -> List[ImportView]:
    """Import and export directives with their combinators.

    The exposed names come from the directive text; the grammar only needs to
    delimit the directive itself.
    """
    imports = []
    for node in tree.nodes_of_type("import_or_export"):
        text = _COMMENT_RE.sub(" ", tree.text(node))
        match = _DIRECTIVE_RE.search(text)
        if match is None:
            continue
        rest = _CONFIGURATION_RE.sub(" ", text[match.end():])
        alias = None
        show: List[str] = []
        hide: List[str] = []
        is_deferred = False
        current = None
        words = _IDENT_RE.findall(rest)
        i = 0
        while i < len(words):
            word = words[i]
            if word == "deferred":
                is_deferred = True
            elif word == "as" and i + 1 < len(words):
                alias = words[i + 1]
                current = None
                i += 1
            elif word == "show":
                current = show
            elif word == "hide":
                current = hide
            elif current is not None:
                current.append(word)
            i += 1
        imports.append(ImportView(
            uri=match.group(3),
            directive=match.group(1),
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            alias=alias,
            show=tuple(show),
            hide=tuple(hide),
            is_deferred=is_deferred,
            node=node,
            tree=tree,
        ))
    return imports


def extract_fields(tree: SyntaxTree) -> List[FieldView]:
    """Instance and static fields declared in class-like bodies."""
    fields = []
    for node in tree.nodes_of_type("declaration"):
        if _is_signature_container(node) or _enclosing_member_scope(node) is None:
            continue
        names = _declared_names(node)
        if not names:
            continue
        modifiers, type_text = _split_prefix(
            tree.source.slice(node.start_byte, names[0].start_byte))
        owner = _enclosing_class_name(tree, node)
        for name in names:
            fields.append(FieldView(
                name=tree.text(name),
                start_byte=name.start_byte,
                end_byte=name.end_byte,
                type_annotation=type_text,
                modifiers=modifiers,
                enclosing_class=owner,
                node=node,
                tree=tree,
            ))
    return fields


def _local_variable_names(node: Node) -> List[Node]:
    names = []
    name = node.child_by_field_name("name")
    if name is None:
        declared = _first_child_of_type(node, "declared_identifier")
        if declared is not None:
            name = declared.child_by_field_name("name")
            if name is None:
                name = _first_child_of_type(declared, "identifier")
    if name is None:
        name = _first_child_of_type(node, "identifier")
    if name is not None:
        names.append(name)
    for child in node.named_children:
        if child.type in _DECLARATORS:
            ident = _name_node(child)
            if ident is not None:
                names.append(ident)
    return names


def extract_variables(tree: SyntaxTree) -> List[VariableView]:
    """Local variables and top-level variables."""
    variables = []
    for node in tree.walk():
        if node.type == "initialized_variable_definition":
            scope = "local"
            names = _local_variable_names(node)
        elif node.type == "top_level_definition" and not _is_signature_container(node):
            scope = "top_level"
            names = _declared_names(node)
        elif node.type in _DECLARATOR_LISTS and node.parent is not None and node.parent.type == "program":
            scope = "top_level"
            names = _list_names(node)
        else:
            continue
        if not names:
            continue
        start = node.start_byte
        if node.parent is not None and node.parent.type == "program":
            start = _program_prefix_start(tree, node)
        modifiers, type_text = _split_prefix(
            tree.source.slice(start, names[0].start_byte))
        if scope == "local" and node.parent is not None and node.parent.type == "local_variable_declaration":
            # Modifiers such as `final` may sit on the enclosing declaration
            outer_modifiers, _ = _split_prefix(
                tree.source.slice(node.parent.start_byte, node.start_byte))
            modifiers = modifiers | outer_modifiers
        for name in names:
            variables.append(VariableView(
                name=tree.text(name),
                scope=scope,
                start_byte=name.start_byte,
                end_byte=name.end_byte,
                type_annotation=type_text,
                modifiers=modifiers,
                node=node,
                tree=tree,
            ))
    return variables


def _type_arguments_after(node: Node) -> Optional[Node]:
    sibling = node.next_sibling
    if sibling is not None and sibling.type == "type_arguments":
        return sibling
    return _first_child_of_type(node, "type_arguments")


def extract_type_annotations(tree: SyntaxTree) -> List[TypeAnnotationView]:
    annotations = []
    content = tree.source.content
    for node in tree.walk():
        if node.type == "type_identifier":
            pass
        elif node.type == "dynamic" and node.child_count == 0:
            # some grammar versions emit `dynamic` as a keyword token
            if node.parent is not None and node.parent.type == "type_identifier":
                continue
        else:
            continue
        args_node = _type_arguments_after(node)
        full_end = node.end_byte
        type_args: Tuple[str, ...] = ()
        if args_node is not None:
            type_args = _split_type_arguments(tree.text(args_node))
            full_end = max(full_end, args_node.end_byte)
        marker = (args_node if args_node is not None and args_node.parent == node.parent else node).next_sibling
        is_nullable = False
        if marker is not None and marker.type in ("?", "nullable_type"):
            is_nullable = True
            full_end = marker.end_byte
        elif content[full_end:full_end + 1] == b"?":
            is_nullable = True
            full_end += 1
        parent = node.parent
        annotations.append(TypeAnnotationView(
            name=tree.text(node),
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            full_end_byte=full_end,
            type_arguments=type_args,
            is_nullable=is_nullable,
            is_type_argument=parent is not None and parent.type == "type_arguments",
            node=node,
            tree=tree,
        ))
    return annotations


_TYPE_PARAMETER_RE = re.compile(r"^([A-Za-z_$][\w$]*)(?:\s+extends\s+(.+))?$", re.S)


def _type_parameters_in(tree: SyntaxTree, root: Node) -> List[TypeParameterView]:
    params = []
    for node in tree.walk(root):
        if node.type != "type_parameter":
            continue
        text = _METADATA_RE.sub(" ", _COMMENT_RE.sub(" ", tree.text(node))).strip()
        match = _TYPE_PARAMETER_RE.match(text)
        if match is None:
            continue
        params.append(TypeParameterView(
            name=match.group(1),
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            bound=match.group(2).strip() if match.group(2) else None,
            node=node,
            tree=tree,
        ))
    return params


def extract_type_parameters(tree: SyntaxTree) -> List[TypeParameterView]:
    return _type_parameters_in(tree, tree.root_node)


def extract_expressions(tree: SyntaxTree) -> List[ExpressionView]:
    return [
        ExpressionView(
            kind=node.type,
            text=tree.text(node),
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            node=node,
            tree=tree,
        )
        for node in tree.walk()
        if node.is_named and node.type in EXPRESSION_KINDS
    ]


def extract_tokens(tree: SyntaxTree) -> List[Token]:
    """Leaf tokens in source order. A comment is one token even when it has children."""
    tokens = []
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.child_count and node.type not in _COMMENT_KINDS:
            stack.extend(reversed(node.children))
            continue
        if node.end_byte > node.start_byte:
            tokens.append(Token(
                kind=node.type,
                text=tree.text(node),
                start_byte=node.start_byte,
                end_byte=node.end_byte,
                start_point=tuple(node.start_point),
                end_point=tuple(node.end_point),
            ))
    return tokens
