from __future__ import annotations

"""PHP front-end: tree-sitter-php concrete syntax tree -> SyntaxNode tree.

The lowered tree follows php-ast conventions for everything the outline
reads (class-like declarations, property groups, methods, parameters and
type expressions). Statements and expressions are collapsed: a block keeps
only its declaration descendants, in source order, so traversal depth is
bounded by declaration nesting rather than expression nesting.
"""

from collections.abc import Callable
from functools import lru_cache
from pathlib import Path

import tree_sitter_php
from tree_sitter import Language, Node, Parser

from php_outline.app.core.logging import get_logger
from php_outline.outline.syntax import (
    Child,
    Modifier,
    NodeKind,
    SyntaxNode,
    TypeFlag,
    list_node,
)

logger = get_logger(__name__)

_PARAMETER_TYPES = frozenset(
    {"simple_parameter", "variadic_parameter", "property_promotion_parameter"}
)

_TYPE_NODE_TYPES = frozenset(
    {
        "primitive_type",
        "bottom_type",
        "named_type",
        "optional_type",
        "union_type",
        "intersection_type",
        "disjunctive_normal_form_type",
        "type_list",
    }
)

_MODIFIER_BITS: dict[str, int] = {
    "static_modifier": Modifier.STATIC,
    "abstract_modifier": Modifier.ABSTRACT,
    "final_modifier": Modifier.FINAL,
    "readonly_modifier": Modifier.READONLY,
    "var_modifier": Modifier.PUBLIC,
}

_VISIBILITY_BITS: dict[str, int] = {
    "public": Modifier.PUBLIC,
    "protected": Modifier.PROTECTED,
    "private": Modifier.PRIVATE,
}

_VISIBILITY_MASK = Modifier.PUBLIC | Modifier.PROTECTED | Modifier.PRIVATE

# Keywords php-ast reports as AST_TYPE rather than AST_NAME.
_TYPE_KEYWORDS: dict[str, int] = {
    "null": TypeFlag.NULL,
    "false": TypeFlag.FALSE,
    "true": TypeFlag.TRUE,
    "bool": TypeFlag.BOOL,
    "int": TypeFlag.LONG,
    "float": TypeFlag.DOUBLE,
    "string": TypeFlag.STRING,
    "array": TypeFlag.ARRAY,
    "object": TypeFlag.OBJECT,
    "callable": TypeFlag.CALLABLE,
    "iterable": TypeFlag.ITERABLE,
    "void": TypeFlag.VOID,
    "static": TypeFlag.STATIC,
    "mixed": TypeFlag.MIXED,
    "never": TypeFlag.NEVER,
}


class PhpParseError(Exception):
    """Source could not be parsed into a syntax tree."""

    def __init__(self, message: str, lineno: int = 0) -> None:
        super().__init__(message)
        self.lineno = lineno


@lru_cache(maxsize=1)
def _php_language() -> Language:
    return Language(tree_sitter_php.language_php())


def _new_parser() -> Parser:
    # Parsers hold mutable state; one per parse keeps callers thread-safe.
    parser = Parser()
    try:
        parser.set_language(_php_language())
    except AttributeError:  # py-tree-sitter >= 0.23 dropped set_language
        parser.language = _php_language()
    return parser


def _text(node: Node) -> str:
    return node.text.decode("utf-8", errors="replace")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _strip_variable(text: str) -> str:
    return text[1:] if text.startswith("$") else text


def _strip_namespace_root(text: str) -> str:
    return text[1:] if text.startswith("\\") else text


def _first_error(root: Node) -> Node | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def _syntax_error(node: Node) -> PhpParseError:
    line = _line(node)
    if node.is_missing:
        return PhpParseError(f"syntax error, missing '{node.type}' on line {line}", line)
    snippet = _text(node).strip().splitlines()
    token = snippet[0][:40] if snippet else ""
    if token:
        return PhpParseError(f"syntax error, unexpected '{token}' on line {line}", line)
    return PhpParseError(f"syntax error, unexpected end of file on line {line}", line)


class _Lowering:
    """Translate one tree-sitter tree. Not shared between threads.

    Declaration bodies are filled from a work queue instead of by recursion,
    so arbitrarily deep nesting of functions and classes lowers without
    touching the interpreter's recursion limit.
    """

    def __init__(self) -> None:
        self._queue: list[tuple[Node, dict[int, Child]]] = []
        self._handlers: dict[str, Callable[[Node], SyntaxNode | None]] = {
            "class_declaration": self._class,
            "interface_declaration": self._class,
            "trait_declaration": self._class,
            "enum_declaration": self._class,
            "anonymous_class": self._class,
            "object_creation_expression": self._object_creation,
            "property_declaration": self._property_group,
            "method_declaration": self._method,
            "function_definition": self._function,
        }

    def block(self, node: Node | None, kind: NodeKind = NodeKind.OTHER) -> SyntaxNode | None:
        """Lower ``node`` to a list of its declaration descendants."""
        lowered = self._deferred(node, kind)
        while self._queue:
            current, items = self._queue.pop()
            self._collect(current, items)
        return lowered

    def _deferred(self, node: Node | None, kind: NodeKind) -> SyntaxNode | None:
        # The list node is returned empty and filled once its turn in the queue comes.
        if node is None:
            return None
        items: dict[int, Child] = {}
        self._queue.append((node, items))
        return SyntaxNode(kind=kind, children=items, lineno=_line(node))

    def _collect(self, node: Node, items: dict[int, Child]) -> None:
        stack = list(reversed(node.named_children))
        while stack:
            current = stack.pop()
            handler = self._handlers.get(current.type)
            lowered = handler(current) if handler is not None else None
            if lowered is not None:
                items[len(items)] = lowered
            else:
                stack.extend(reversed(current.named_children))

    # -- modifiers ---------------------------------------------------------

    def _modifier_flags(self, node: Node) -> int:
        flags = 0
        for child in node.children:
            if child.type == "visibility_modifier":
                # "private(set)" style asymmetric visibility keeps its keyword
                keyword = _text(child).split("(", 1)[0].strip().lower()
                flags |= _VISIBILITY_BITS.get(keyword, 0)
            else:
                flags |= _MODIFIER_BITS.get(child.type, 0)
        if not flags & _VISIBILITY_MASK:
            flags |= Modifier.PUBLIC
        return flags

    # -- names -------------------------------------------------------------

    def _name(self, node: Node) -> SyntaxNode:
        if node.type == "named_type" and node.named_child_count:
            node = node.named_children[0]
        return SyntaxNode(
            kind=NodeKind.NAME,
            children={"name": _strip_namespace_root(_text(node))},
            lineno=_line(node),
        )

    def _name_list(self, clause: Node) -> SyntaxNode:
        names = [
            self._name(child)
            for child in clause.named_children
            if child.type in ("name", "qualified_name", "named_type")
        ]
        return list_node(NodeKind.NAME_LIST, names, lineno=_line(clause))

    # -- declarations ------------------------------------------------------

    def _class(self, node: Node) -> SyntaxNode:
        name_node = node.child_by_field_name("name")
        name = _text(name_node) if name_node is not None else None

        extends: Child = None
        implements: Child = None
        for child in node.named_children:
            if child.type == "base_clause":
                parents = self._name_list(child)
                if node.type == "interface_declaration":
                    # php-ast stores an interface's parents as its implements list
                    implements = parents
                else:
                    extends = parents.child(0)
            elif child.type == "class_interface_clause":
                implements = self._name_list(child)

        body = node.child_by_field_name("body")
        if body is None:
            body = next(
                (c for c in node.named_children if c.type in ("declaration_list", "enum_declaration_list")),
                None,
            )

        return SyntaxNode(
            kind=NodeKind.CLASS,
            children={
                "name": name,
                "docComment": None,
                "extends": extends,
                "implements": implements,
                "stmts": self._deferred(body, NodeKind.STMT_LIST),
            },
            lineno=_line(node),
        )

    def _object_creation(self, node: Node) -> SyntaxNode | None:
        # Older grammars inline anonymous class bodies into ``new``.
        if not any(c.type == "declaration_list" for c in node.named_children):
            return None
        return self._class(node)

    def _property_group(self, node: Node) -> SyntaxNode:
        elements = [
            self._property_element(child)
            for child in node.named_children
            if child.type == "property_element"
        ]
        return SyntaxNode(
            kind=NodeKind.PROP_GROUP,
            flags=self._modifier_flags(node),
            children={
                "type": self._type(self._type_child(node)),
                "props": list_node(NodeKind.PROP_DECL, elements, lineno=_line(node)),
                "attributes": None,
            },
            lineno=_line(node),
        )

    def _property_element(self, node: Node) -> SyntaxNode:
        variable = node.child_by_field_name("name")
        if variable is None:
            variable = next((c for c in node.named_children if c.type == "variable_name"), None)
        return SyntaxNode(
            kind=NodeKind.PROP_ELEM,
            children={
                "name": _strip_variable(_text(variable)) if variable is not None else None,
                "default": None,
                "docComment": None,
            },
            lineno=_line(node),
        )

    def _parameters(self, node: Node | None) -> SyntaxNode | None:
        if node is None:
            return None
        params = [self._parameter(c) for c in node.named_children if c.type in _PARAMETER_TYPES]
        return list_node(NodeKind.PARAM_LIST, params, lineno=_line(node))

    def _parameter(self, node: Node) -> SyntaxNode:
        variable = node.child_by_field_name("name")
        flags = 0
        if node.type == "property_promotion_parameter":
            flags = self._modifier_flags(node)
        return SyntaxNode(
            kind=NodeKind.PARAM,
            flags=flags,
            children={
                "type": self._type(self._type_child(node)),
                "name": _strip_variable(_text(variable)) if variable is not None else None,
                "default": None,
            },
            lineno=_line(node),
        )

    def _callable(self, node: Node, kind: NodeKind, flags: int) -> SyntaxNode:
        name_node = node.child_by_field_name("name")
        return_type = node.child_by_field_name("return_type")
        if return_type is None or return_type.type not in _TYPE_NODE_TYPES:
            # parameter types live under formal_parameters, so a direct
            # type child can only be the return type
            return_type = self._type_child(return_type if return_type is not None else node)
        return SyntaxNode(
            kind=kind,
            flags=flags,
            children={
                "name": _text(name_node) if name_node is not None else None,
                "docComment": None,
                "params": self._parameters(node.child_by_field_name("parameters")),
                "stmts": self._deferred(node.child_by_field_name("body"), NodeKind.STMT_LIST),
                "returnType": self._type(return_type),
                "attributes": None,
            },
            lineno=_line(node),
        )

    def _method(self, node: Node) -> SyntaxNode:
        return self._callable(node, NodeKind.METHOD, self._modifier_flags(node))

    def _function(self, node: Node) -> SyntaxNode:
        return self._callable(node, NodeKind.FUNC_DECL, 0)

    # -- types -------------------------------------------------------------

    def _type_child(self, node: Node) -> Node | None:
        typed = node.child_by_field_name("type")
        if typed is not None:
            return typed
        return next((c for c in node.named_children if c.type in _TYPE_NODE_TYPES), None)

    def _type(self, node: Node | None) -> Child:
        if node is None:
            return None
        kind = node.type
        if kind == "optional_type":
            inner = node.named_children[0] if node.named_child_count else None
            return SyntaxNode(
                kind=NodeKind.NULLABLE_TYPE,
                children={"type": self._type(inner)},
                lineno=_line(node),
            )
        if kind in ("union_type", "disjunctive_normal_form_type", "type_list"):
            return self._type_list(NodeKind.TYPE_UNION, node)
        if kind == "intersection_type":
            return self._type_list(NodeKind.TYPE_INTERSECTION, node)
        if kind in ("primitive_type", "bottom_type", "named_type", "name", "qualified_name"):
            flag = _TYPE_KEYWORDS.get(_text(node).strip().lower())
            if flag is not None:
                return SyntaxNode(kind=NodeKind.TYPE, flags=flag, lineno=_line(node))
            return self._name(node)
        return SyntaxNode(kind=NodeKind.OTHER, lineno=_line(node))

    def _type_list(self, kind: NodeKind, node: Node) -> Child:
        members = [self._type(c) for c in node.named_children if c.type != "comment"]
        # Some grammar versions wrap every single type in union_type
        if len(members) == 1:
            return members[0]
        return list_node(kind, members, lineno=_line(node))


def parse_source(source: bytes) -> SyntaxNode:
    """Parse PHP source into a SyntaxNode tree.

    Raises
    ------
    PhpParseError
        If the source contains a syntax error.
    """
    tree = _new_parser().parse(source)
    root = tree.root_node
    if root.has_error:
        error = _first_error(root)
        if error is not None:
            raise _syntax_error(error)
        raise PhpParseError(f"syntax error, unexpected input on line {_line(root)}", _line(root))
    return _Lowering().block(root, NodeKind.STMT_LIST)


def parse_file(path: str | Path) -> SyntaxNode:
    """Read and parse a PHP file. I/O errors propagate unchanged."""
    source = Path(path).read_bytes()
    logger.debug("Parsing %s (%d bytes)", path, len(source))
    return parse_source(source)
