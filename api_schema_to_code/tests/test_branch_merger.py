"""
Tests for allOf/oneOf branch merging.
"""

from __future__ import annotations

import pytest

from api_schema_to_code.pipeline.analyzer import (
    DefinitionIndex,
    IdentifierCaser,
    NamedType,
    NullableType,
    OpaqueType,
    ScalarKind,
    ScalarType,
    TypeResolver,
    structurally_equal,
)
from api_schema_to_code.pipeline.errors import MalformedCompositionError
from api_schema_to_code.pipeline.schema_ast import SchemaParser


def ref(name):
    return {"$ref": f"objects.json#/definitions/{name}"}


def merge(definitions, target):
    """Resolve the composition declared as `target` among `definitions`."""
    parsed = SchemaParser().parse_objects({"definitions": definitions})
    resolver = TypeResolver(IdentifierCaser(), DefinitionIndex(parsed))
    return resolver.resolve(resolver.index.get_definition(target).body)


BASE = {
    "x": {"type": "object", "properties": {"a": {"type": "string", "description": "From X"}, "b": {"type": "integer"}}},
    "y": {"type": "object", "properties": {"b": {"type": "integer"}, "c": {"type": "boolean"}}},
}


def test_merge_union_of_fields():
    """Branch fields are united, sorted by name and all nullable."""
    composite = merge({**BASE, "a": {"allOf": [ref("x"), ref("y")]}}, "a")

    assert [f.schema_name for f in composite.fields] == ["a", "b", "c"]
    assert [f.name for f in composite.fields] == ["A", "B", "C"]
    assert [f.type for f in composite.fields] == [
        NullableType(ScalarType(ScalarKind.STRING)),
        NullableType(ScalarType(ScalarKind.INTEGER)),
        NullableType(ScalarType(ScalarKind.BOOLEAN)),
    ]
    assert all(f.omit_empty for f in composite.fields)
    assert composite.fields[0].description == "From X"
    assert composite.origins == ("x", "y")


def test_merge_conflicting_field_is_opaque():
    """Branches disagreeing on a field's shape make it opaque."""
    definitions = {
        "x": {"type": "object", "properties": {"v": {"type": "string"}}},
        "y": {"type": "object", "properties": {"v": {"type": "integer"}}},
        "a": {"oneOf": [ref("x"), ref("y")]},
    }
    composite = merge(definitions, "a")
    assert len(composite.fields) == 1
    assert composite.fields[0].schema_name == "v"
    assert composite.fields[0].type == OpaqueType()
    assert composite.fields[0].omit_empty


def test_merge_agreeing_refs_keep_named_type():
    """Identical references in several branches keep the referenced type."""
    definitions = {
        "base_sex": {"type": "integer", "enum": [0, 1]},
        "x": {"type": "object", "properties": {"sex": ref("base_sex")}},
        "y": {"type": "object", "properties": {"sex": ref("base_sex")}},
        "a": {"allOf": [ref("x"), ref("y")]},
    }
    composite = merge(definitions, "a")
    assert composite.fields[0].type == NullableType(NamedType("BaseSex", "base_sex"))


def test_merge_is_deterministic():
    """Branch order does not change the field order or the types."""
    forward = merge({**BASE, "a": {"allOf": [ref("x"), ref("y")]}}, "a")
    backward = merge({**BASE, "a": {"allOf": [ref("y"), ref("x")]}}, "a")
    assert forward == backward
    assert merge({**BASE, "a": {"allOf": [ref("x"), ref("y")]}}, "a") == forward


def test_merge_inline_branch():
    """Inline object branches contribute their properties."""
    definitions = {
        **BASE,
        "a": {"allOf": [ref("x"), {"type": "object", "properties": {"d": {"type": "number"}}}]},
    }
    composite = merge(definitions, "a")
    assert [f.schema_name for f in composite.fields] == ["a", "b", "d"]
    assert composite.origins == ("x", "{d}")


def test_merge_nested_composition():
    """A branch referring to another composition is flattened."""
    definitions = {
        **BASE,
        "inner": {"allOf": [ref("x")]},
        "a": {"allOf": [ref("inner"), ref("y")]},
    }
    composite = merge(definitions, "a")
    assert [f.schema_name for f in composite.fields] == ["a", "b", "c"]


def test_merge_field_composition_reusing_branch():
    """A field may compose the same definitions as its owner without being a cycle."""
    definitions = {
        **BASE,
        "a": {"allOf": [ref("x"), {"type": "object", "properties": {"child": {"allOf": [ref("x")]}}}]},
    }
    composite = merge(definitions, "a")
    assert [f.schema_name for f in composite.fields] == ["a", "b", "child"]
    child = composite.fields[2].type
    assert isinstance(child, NullableType)
    assert [f.schema_name for f in child.inner.fields] == ["a", "b"]


def test_merge_ignores_branches_without_properties():
    """Referenced non-object definitions contribute nothing."""
    definitions = {
        **BASE,
        "kind": {"type": "string", "enum": ["a"]},
        "a": {"allOf": [ref("x"), ref("kind")]},
    }
    composite = merge(definitions, "a")
    assert [f.schema_name for f in composite.fields] == ["a", "b"]


@pytest.mark.parametrize(
    "definitions",
    [
        # Reference to a reference
        {**BASE, "alias": ref("x"), "a": {"allOf": [ref("alias")]}},
        # Inline branch that is not an object
        {**BASE, "a": {"allOf": [ref("x"), {"type": "string"}]}},
        # Inline object without properties
        {**BASE, "a": {"oneOf": [{"type": "object"}]}},
        # Nothing contributed at all
        {"kind": {"type": "string", "enum": ["a"]}, "a": {"allOf": [ref("kind")]}},
        # Cyclic compositions
        {"a": {"allOf": [ref("b")]}, "b": {"allOf": [ref("a")]}},
        # Composition reached again through one of its own fields
        {"a": {"allOf": [{"type": "object", "properties": {"child": {"allOf": [ref("a")]}}}]}},
    ],
)
def test_merge_malformed(definitions):
    """Malformed compositions are fatal."""
    with pytest.raises(MalformedCompositionError):
        merge(definitions, "a")


def test_structurally_equal_ignores_descriptions():
    """Descriptions and source locations do not affect structural equality."""
    parsed = SchemaParser().parse_objects(
        {
            "definitions": {
                "a": {"type": "array", "description": "one", "items": {"type": "integer"}},
                "b": {"type": "array", "description": "two", "items": {"type": "integer"}},
                "c": {"type": "array", "items": {"type": "string"}},
            }
        }
    )
    a, b, c = (d.body for d in parsed)
    assert structurally_equal(a, b)
    assert not structurally_equal(a, c)
    assert not structurally_equal(a, None)
    assert structurally_equal(None, None)
