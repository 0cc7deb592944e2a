from __future__ import annotations

"""Canonical type strings for PHP type expressions.

Accepts the three shapes a declared type can take in the syntax tree: a
bare ``TYPE_*`` flag (older tree versions), an already-resolved name, or a
type node. Every input maps to a string; nothing here raises.
"""

from collections.abc import Callable
from typing import Union

from php_outline.outline.syntax import NodeKind, SyntaxNode, TypeFlag

UNKNOWN = "unknown"
MAX_TYPE_DEPTH = 64

TypeExpr = Union[int, str, SyntaxNode]

# Node ids on the current recursion path.
_Path = tuple[int, ...]

_FLAG_NAMES: dict[int, str] = {
    TypeFlag.VOID: "void",
    TypeFlag.NULL: "null",
    TypeFlag.FALSE: "false",
    TypeFlag.BOOL: "bool",
    TypeFlag.LONG: "int",
    TypeFlag.DOUBLE: "float",
    TypeFlag.STRING: "string",
    TypeFlag.ARRAY: "array",
    TypeFlag.OBJECT: "object",
    TypeFlag.CALLABLE: "callable",
    TypeFlag.ITERABLE: "iterable",
    TypeFlag.MIXED: "mixed",
}


def type_flag_name(flag: int) -> str:
    """Map a ``TYPE_*`` flag to its keyword, ``"unknown"`` when unmapped."""
    return _FLAG_NAMES.get(flag, UNKNOWN)


def _name(node: SyntaxNode, path: _Path) -> str:
    name = node.child("name")
    return name if isinstance(name, str) else UNKNOWN


def _nullable(node: SyntaxNode, path: _Path) -> str:
    return "?" + _stringify(node.child("type"), path)


def _joined(separator: str) -> Callable[[SyntaxNode, _Path], str]:
    # Members are joined flat: a DNF type (A&B)|null renders as A&B|null.
    def render(node: SyntaxNode, path: _Path) -> str:
        return separator.join(_stringify(child, path) for child in node.iter_children())

    return render


_NODE_RENDERERS: dict[NodeKind, Callable[[SyntaxNode, _Path], str]] = {
    NodeKind.TYPE: lambda node, path: type_flag_name(node.flags),
    NodeKind.NAME: _name,
    NodeKind.NULLABLE_TYPE: _nullable,
    NodeKind.TYPE_UNION: _joined("|"),
    NodeKind.TYPE_INTERSECTION: _joined("&"),
}


def _stringify(value: object, path: _Path) -> str:
    # bool is an int subclass but never a type flag
    if isinstance(value, bool):
        return UNKNOWN
    if isinstance(value, int):
        return type_flag_name(value)
    if isinstance(value, str):
        return value
    if not isinstance(value, SyntaxNode):
        return UNKNOWN
    if len(path) >= MAX_TYPE_DEPTH or id(value) in path:
        return UNKNOWN
    render = _NODE_RENDERERS.get(value.kind)
    if render is None:
        return UNKNOWN
    return render(value, path + (id(value),))


def stringify_type(value: TypeExpr) -> str:
    """Render a type expression as its canonical string.

    Examples: ``?string``, ``int|float``, ``Countable&Traversable``.
    Wrappers nested deeper than ``MAX_TYPE_DEPTH``, or a node that contains
    itself, render as ``"unknown"``.
    """
    return _stringify(value, ())
