from __future__ import annotations

"""Generic syntax-tree model consumed by the outline reducer.

Nodes follow the php-ast shape: a ``kind`` tag, a ``flags`` bitmask and an
ordered mapping of child slots. Slot keys are names (``"name"``,
``"returnType"``) for fixed-arity nodes and integer indexes for list nodes.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum, IntFlag
from typing import Any, Union


class NodeKind(str, Enum):
    """Node categories, named after php-ast kinds."""

    CLASS = "AST_CLASS"
    NAME = "AST_NAME"
    NAME_LIST = "AST_NAME_LIST"
    STMT_LIST = "AST_STMT_LIST"
    PROP_GROUP = "AST_PROP_GROUP"
    PROP_DECL = "AST_PROP_DECL"
    PROP_ELEM = "AST_PROP_ELEM"
    METHOD = "AST_METHOD"
    FUNC_DECL = "AST_FUNC_DECL"
    PARAM_LIST = "AST_PARAM_LIST"
    PARAM = "AST_PARAM"
    TYPE = "AST_TYPE"
    NULLABLE_TYPE = "AST_NULLABLE_TYPE"
    TYPE_UNION = "AST_TYPE_UNION"
    TYPE_INTERSECTION = "AST_TYPE_INTERSECTION"
    # Any construct the outline never inspects; kept so traversal order
    # matches the source.
    OTHER = "AST_OTHER"


class Modifier(IntFlag):
    """``ast\\flags\\MODIFIER_*`` bits carried by members."""

    PUBLIC = 1
    PROTECTED = 2
    PRIVATE = 4
    STATIC = 16
    FINAL = 32
    ABSTRACT = 64
    READONLY = 128


class TypeFlag(IntEnum):
    """``ast\\flags\\TYPE_*`` values used by ``AST_TYPE`` nodes (PHP 8)."""

    NULL = 1
    FALSE = 2
    TRUE = 3
    LONG = 4
    DOUBLE = 5
    STRING = 6
    ARRAY = 7
    OBJECT = 8
    CALLABLE = 12
    ITERABLE = 13
    VOID = 14
    STATIC = 15
    MIXED = 16
    NEVER = 17
    BOOL = 18


class Visibility(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


# A child slot holds a node, a primitive literal, or nothing.
Child = Union["SyntaxNode", str, int, None]


@dataclass(frozen=True)
class SyntaxNode:
    kind: NodeKind
    flags: int = 0
    children: Mapping[Any, Child] = field(default_factory=dict)
    lineno: int = 0

    def child(self, slot: Any) -> Child:
        """Return the child in ``slot`` or None when the slot is absent."""
        return self.children.get(slot)

    def iter_children(self) -> Iterator[Child]:
        """Yield children in slot order."""
        return iter(self.children.values())


@dataclass(frozen=True)
class Modifiers:
    visibility: Visibility
    is_abstract: bool


def decode_modifiers(flags: int) -> Modifiers:
    """Decode a member's modifier bitmask.

    Public wins over protected, which wins over private; a mask with no
    visibility bit at all is treated as private.
    """
    if flags & Modifier.PUBLIC:
        visibility = Visibility.PUBLIC
    elif flags & Modifier.PROTECTED:
        visibility = Visibility.PROTECTED
    else:
        visibility = Visibility.PRIVATE
    return Modifiers(visibility=visibility, is_abstract=bool(flags & Modifier.ABSTRACT))


def list_node(kind: NodeKind, items: list[Child], lineno: int = 0, flags: int = 0) -> SyntaxNode:
    """Build a list-shaped node whose children are indexed 0..n-1."""
    return SyntaxNode(kind=kind, flags=flags, children=dict(enumerate(items)), lineno=lineno)
