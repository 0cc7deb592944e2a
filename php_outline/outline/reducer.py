from __future__ import annotations

"""Reduce a syntax tree to a compact class outline.

Finds the first class-like declaration in a tree and extracts its name,
implemented interfaces, properties and methods. Extraction is total: a
missing or malformed slot degrades to a sentinel, an empty list or a zero
count, never to an exception.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from php_outline.outline.syntax import (
    Child,
    Modifiers,
    NodeKind,
    SyntaxNode,
    Visibility,
    decode_modifiers,
)
from php_outline.outline.types import stringify_type

UNKNOWN_CLASS = "UnknownClass"
UNKNOWN_METHOD = "unknown"
UNTYPED = "untyped"


class FilterMode(str, Enum):
    ALL = "ALL"
    PUBLIC_ONLY = "PUBLIC"

    def allows(self, modifiers: Modifiers) -> bool:
        if self is FilterMode.ALL:
            return True
        return modifiers.visibility is Visibility.PUBLIC and not modifiers.is_abstract


@dataclass(frozen=True)
class PropertyEntry:
    name: str
    visibility: Visibility

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "visibility": self.visibility.value}


@dataclass(frozen=True)
class MethodEntry:
    name: str
    visibility: Visibility
    parameter_count: int
    return_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "visibility": self.visibility.value,
            "parameters": self.parameter_count,
            "return_type": self.return_type,
        }


@dataclass(frozen=True)
class ClassSummary:
    name: str
    interfaces: tuple[str, ...] = ()
    properties: tuple[PropertyEntry, ...] = ()
    methods: tuple[MethodEntry, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the ``class_summary`` wire shape."""
        return {
            "type": "class_summary",
            "name": self.name,
            "interfaces": list(self.interfaces),
            "properties": [p.to_dict() for p in self.properties],
            "methods": [m.to_dict() for m in self.methods],
        }


def iter_preorder(root: Child) -> Iterator[SyntaxNode]:
    """Yield every node under ``root`` (inclusive) in depth-first pre-order.

    Children are visited in slot order; literal and empty slots are skipped.
    """
    if not isinstance(root, SyntaxNode):
        return
    stack: list[SyntaxNode] = [root]
    while stack:
        node = stack.pop()
        yield node
        children = [c for c in node.iter_children() if isinstance(c, SyntaxNode)]
        stack.extend(reversed(children))


def find_first_declaration(root: Child) -> SyntaxNode | None:
    """Return the first class-like declaration in pre-order, or None."""
    for node in iter_preorder(root):
        if node.kind == NodeKind.CLASS:
            return node
    return None


def _str_slot(node: SyntaxNode, slot: str) -> str | None:
    value = node.child(slot)
    return value if isinstance(value, str) else None


def _class_name(decl: SyntaxNode) -> str:
    return _str_slot(decl, "name") or UNKNOWN_CLASS


def _interfaces(decl: SyntaxNode) -> list[str]:
    implements = decl.child("implements")
    if not isinstance(implements, SyntaxNode):
        return []
    names: list[str] = []
    for entry in implements.iter_children():
        if isinstance(entry, SyntaxNode):
            name = _str_slot(entry, "name")
            if name is not None:
                names.append(name)
    return names


def _properties(group: SyntaxNode, modifiers: Modifiers) -> Iterator[PropertyEntry]:
    props = group.child("props")
    if not isinstance(props, SyntaxNode):
        return
    for elem in props.iter_children():
        if not isinstance(elem, SyntaxNode):
            continue
        name = _str_slot(elem, "name")
        if name is not None:
            yield PropertyEntry(name=name, visibility=modifiers.visibility)


def _parameter_count(method: SyntaxNode) -> int:
    params = method.child("params")
    if not isinstance(params, SyntaxNode):
        return 0
    return len(params.children)


def _return_type(method: SyntaxNode) -> str:
    return_type = method.child("returnType")
    if return_type is None:
        return UNTYPED
    return stringify_type(return_type)


def _method(method: SyntaxNode, modifiers: Modifiers) -> MethodEntry:
    return MethodEntry(
        name=_str_slot(method, "name") or UNKNOWN_METHOD,
        visibility=modifiers.visibility,
        parameter_count=_parameter_count(method),
        return_type=_return_type(method),
    )


def summarize(decl: SyntaxNode, filter_mode: FilterMode = FilterMode.ALL) -> ClassSummary:
    """Build the outline of a class-like declaration.

    Parameters
    ----------
    decl : SyntaxNode
        Declaration node, usually from :func:`find_first_declaration`.
    filter_mode : FilterMode
        ``ALL`` keeps every member; ``PUBLIC_ONLY`` keeps public,
        non-abstract members only.

    Returns
    -------
    ClassSummary
        Members in the order they appear in the declaration subtree.
    """
    properties: list[PropertyEntry] = []
    methods: list[MethodEntry] = []

    for node in iter_preorder(decl):
        if node.kind == NodeKind.PROP_GROUP:
            modifiers = decode_modifiers(node.flags)
            if filter_mode.allows(modifiers):
                properties.extend(_properties(node, modifiers))
        elif node.kind == NodeKind.METHOD:
            modifiers = decode_modifiers(node.flags)
            if filter_mode.allows(modifiers):
                methods.append(_method(node, modifiers))

    return ClassSummary(
        name=_class_name(decl),
        interfaces=tuple(_interfaces(decl)),
        properties=tuple(properties),
        methods=tuple(methods),
    )


def outline_tree(root: Child, filter_mode: FilterMode = FilterMode.ALL) -> dict[str, Any] | None:
    """Summarize the first declaration of a tree, or None when there is none."""
    decl = find_first_declaration(root)
    if decl is None:
        return None
    return summarize(decl, filter_mode).to_dict()
