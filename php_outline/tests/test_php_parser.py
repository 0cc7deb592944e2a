from __future__ import annotations

import pytest

from php_outline.outline.php_parser import PhpParseError, parse_source
from php_outline.outline.reducer import FilterMode, find_first_declaration, outline_tree, summarize
from php_outline.outline.syntax import Modifier, NodeKind
from php_outline.tests.samples import (
    BROKEN_PHP,
    FUNCTIONS_PHP,
    SHAPE_PHP,
    USER_PHP,
    nested_functions_php,
)


def _outline(source: str, filter_mode: FilterMode = FilterMode.ALL) -> dict | None:
    return outline_tree(parse_source(source.encode("utf-8")), filter_mode)


def test_user_class_outline() -> None:
    outline = _outline(USER_PHP)
    assert outline is not None
    assert outline["type"] == "class_summary"
    assert outline["name"] == "User"
    assert outline["interfaces"] == ["JsonSerializable", "Countable"]
    assert outline["properties"] == [
        {"name": "id", "visibility": "public"},
        {"name": "name", "visibility": "public"},
        {"name": "email", "visibility": "public"},
        {"name": "roles", "visibility": "protected"},
        {"name": "secret", "visibility": "private"},
    ]
    methods = {m["name"]: m for m in outline["methods"]}
    assert list(methods) == [
        "__construct",
        "getName",
        "find",
        "score",
        "hash",
        "make",
        "jsonSerialize",
        "count",
    ]
    assert methods["__construct"] == {
        "name": "__construct",
        "visibility": "public",
        "parameters": 3,
        "return_type": "untyped",
    }
    assert methods["getName"]["return_type"] == "string"
    assert methods["find"]["parameters"] == 2
    assert methods["find"]["return_type"] == "?string"
    assert methods["score"]["visibility"] == "protected"
    assert methods["score"]["return_type"] == "int|float"
    assert methods["hash"]["visibility"] == "private"
    assert methods["hash"]["return_type"] == "untyped"
    assert methods["make"]["return_type"] == "self"
    assert methods["jsonSerialize"]["return_type"] == "mixed"


def test_user_class_public_only() -> None:
    outline = _outline(USER_PHP, FilterMode.PUBLIC_ONLY)
    assert outline is not None
    assert [p["name"] for p in outline["properties"]] == ["id", "name", "email"]
    names = [m["name"] for m in outline["methods"]]
    assert "hash" not in names
    assert "score" not in names
    assert all(m["visibility"] == "public" for m in outline["methods"])


def test_abstract_methods_dropped_under_public_only() -> None:
    everything = _outline(SHAPE_PHP)
    public = _outline(SHAPE_PHP, FilterMode.PUBLIC_ONLY)
    assert everything is not None and public is not None
    assert [m["name"] for m in everything["methods"]] == ["area", "describe", "sides"]
    assert [m["name"] for m in public["methods"]] == ["describe"]


def test_modifier_flags_are_lowered() -> None:
    tree = parse_source(SHAPE_PHP.encode("utf-8"))
    decl = find_first_declaration(tree)
    assert decl is not None
    stmts = decl.child("stmts")
    area = stmts.child(0)  # type: ignore[union-attr]
    assert area.kind == NodeKind.METHOD  # type: ignore[union-attr]
    assert area.flags & Modifier.ABSTRACT  # type: ignore[union-attr]
    assert area.flags & Modifier.PUBLIC  # type: ignore[union-attr]


def test_file_without_class_has_no_outline() -> None:
    assert _outline(FUNCTIONS_PHP) is None
    assert _outline("<?php\necho 'hi';\n") is None
    assert _outline("plain text, no php tag") is None


def test_members_default_to_public() -> None:
    source = """<?php
class Legacy
{
    var $old;
    static $counter = 0;
    function run($a) {}
}
"""
    outline = _outline(source, FilterMode.PUBLIC_ONLY)
    assert outline is not None
    assert outline["properties"] == [
        {"name": "old", "visibility": "public"},
        {"name": "counter", "visibility": "public"},
    ]
    assert outline["methods"] == [
        {"name": "run", "visibility": "public", "parameters": 1, "return_type": "untyped"}
    ]


def test_interface_parents_reported_as_interfaces() -> None:
    source = """<?php
interface Repository extends Countable, IteratorAggregate
{
    public function find(int $id): ?object;
}
"""
    outline = _outline(source)
    assert outline is not None
    assert outline["name"] == "Repository"
    assert outline["interfaces"] == ["Countable", "IteratorAggregate"]
    assert outline["methods"][0]["return_type"] == "?object"

    decl = find_first_declaration(parse_source(source.encode("utf-8")))
    assert decl is not None
    assert decl.child("extends") is None
    assert decl.child("implements").kind == NodeKind.NAME_LIST  # type: ignore[union-attr]


def test_first_class_wins() -> None:
    source = """<?php
function make() { return 1; }
class First { public function a() {} }
class Second { public function b() {} }
"""
    outline = _outline(source)
    assert outline is not None
    assert outline["name"] == "First"
    assert [m["name"] for m in outline["methods"]] == ["a"]


def test_class_nested_in_block_is_found() -> None:
    source = """<?php
if (!class_exists('Guarded')) {
    class Guarded { private $x; }
}
"""
    outline = _outline(source)
    assert outline is not None
    assert outline["name"] == "Guarded"
    assert outline["properties"] == [{"name": "x", "visibility": "private"}]


def test_intersection_and_union_types() -> None:
    source = """<?php
class Types
{
    public function both(): Countable&Traversable {}
    public function either(int|string|null $v): int|string|null {}
    public function qualified(): \\App\\Model\\User {}
}
"""
    tree = parse_source(source.encode("utf-8"))
    decl = find_first_declaration(tree)
    assert decl is not None
    methods = {m.name: m for m in summarize(decl).methods}
    assert methods["both"].return_type == "Countable&Traversable"
    assert methods["either"].return_type == "int|string|null"
    assert methods["either"].parameter_count == 1
    assert methods["qualified"].return_type == "App\\Model\\User"


def test_promoted_constructor_parameters_are_not_properties() -> None:
    source = """<?php
class Point
{
    public function __construct(private int $x, private int $y = 0) {}
}
"""
    outline = _outline(source)
    assert outline is not None
    assert outline["properties"] == []
    assert outline["methods"][0]["parameters"] == 2


def test_syntax_error_raises() -> None:
    with pytest.raises(PhpParseError) as excinfo:
        parse_source(BROKEN_PHP.encode("utf-8"))
    message = str(excinfo.value)
    assert message.startswith("syntax error, ")
    assert message.endswith(f"on line {excinfo.value.lineno}")
    assert excinfo.value.lineno >= 1


def test_deeply_nested_declarations_lower_without_recursion() -> None:
    outline = _outline(nested_functions_php(600))
    assert outline is not None
    assert outline["name"] == "Inner"
    assert outline["methods"] == [
        {"name": "run", "visibility": "public", "parameters": 0, "return_type": "void"}
    ]
