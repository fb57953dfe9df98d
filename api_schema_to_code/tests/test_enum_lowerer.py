"""
Tests for enum lowering.
"""

from __future__ import annotations

import pytest

from api_schema_to_code.pipeline.analyzer import (
    DefinitionIndex,
    EnumLowerer,
    IdentifierCaser,
    ScalarKind,
    TypeResolver,
)
from api_schema_to_code.pipeline.analyzer.enum_lowerer import format_float
from api_schema_to_code.pipeline.errors import EmptyEnumLabelError, UnsupportedEnumTypeError
from api_schema_to_code.pipeline.schema_ast import EnumNode


def lower(name, **kwargs):
    lowerer = EnumLowerer(TypeResolver(IdentifierCaser(), DefinitionIndex()))
    return lowerer.lower(name, EnumNode(**kwargs))


def test_lower_string_enum_with_names():
    """Display names label the constants; values stay as given."""
    enum_def = lower("Kind", base_type="string", values=["a", "b"], names=["Alpha", "Beta"])
    assert enum_def.name == "Kind"
    assert enum_def.underlying.kind is ScalarKind.STRING
    assert [(m.name, m.value, m.literal) for m in enum_def.members] == [
        ("KindAlpha", "a", '"a"'),
        ("KindBeta", "b", '"b"'),
    ]


def test_lower_string_enum_without_names():
    """Values label the constants when there are no display names."""
    enum_def = lower("UsersNameCase", base_type="string", values=["nom", "gen"])
    assert [m.name for m in enum_def.members] == ["UsersNameCaseNom", "UsersNameCaseGen"]


def test_lower_integer_enum():
    """Integer values are rendered in decimal."""
    enum_def = lower("BaseBoolInt", base_type="integer", values=[0, 1])
    assert [(m.name, m.literal) for m in enum_def.members] == [("BaseBoolInt0", "0"), ("BaseBoolInt1", "1")]

    named = lower("BaseBoolInt", base_type="integer", values=[0, 1], names=["no", "yes"])
    assert [m.name for m in named.members] == ["BaseBoolIntNo", "BaseBoolIntYes"]


def test_lower_number_enum():
    """Numbers use their shortest round-trip text as label."""
    enum_def = lower("Ratio", base_type="number", values=[1.5, 2.0])
    assert [m.literal for m in enum_def.members] == ["1.5", "2.0"]
    assert [m.name for m in enum_def.members] == ["Ratio15", "Ratio2"]


def test_lower_partial_names():
    """Values beyond the display names fall back to their own label."""
    enum_def = lower("Kind", base_type="string", values=["a", "b"], names=["first"])
    assert [m.name for m in enum_def.members] == ["KindFirst", "KindB"]


def test_lower_string_literal_escaping():
    """String literals are valid source text."""
    enum_def = lower("Quote", base_type="string", values=['say "hi"'], names=["hi"])
    assert enum_def.members[0].literal == '"say \\"hi\\""'


def test_lower_empty_enum():
    """An enum without values has no constants."""
    enum_def = lower("Empty", base_type="string", values=[])
    assert enum_def.members == []
    assert enum_def.underlying.kind is ScalarKind.STRING


def test_lower_colliding_constants_are_kept():
    """Labels that case to the same identifier yield duplicate constants."""
    enum_def = lower("Kind", base_type="string", values=["a_b", "aB"])
    assert [m.name for m in enum_def.members] == ["KindAB", "KindAB"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base_type": "boolean", "values": [True, False]},
        {"base_type": "object", "values": [{}]},
        {"base_type": "integer", "values": [1.5]},
        {"base_type": "integer", "values": [True]},
        {"base_type": "number", "values": ["1"]},
        {"base_type": "string", "values": [1]},
    ],
)
def test_lower_unsupported(kwargs):
    """Unsupported kinds and values of the wrong kind are fatal."""
    with pytest.raises(UnsupportedEnumTypeError):
        lower("Bad", **kwargs)


@pytest.mark.parametrize("value,expected", [(1.5, "1.5"), (2.0, "2"), (0.1, "0.1"), (-3.25, "-3.25"), (7, "7")])
def test_format_float(value, expected):
    """Floats render without a trailing .0."""
    assert format_float(value) == expected


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base_type": "string", "values": ["", "a"]},
        {"base_type": "string", "values": ["a", "b"], "names": ["Alpha", ""]},
        {"base_type": "integer", "values": [0, 1], "names": ["", "one"]},
    ],
)
def test_lower_empty_label(kwargs):
    """A constant cannot be named after an empty value or display name."""
    with pytest.raises(EmptyEnumLabelError) as exc_info:
        lower("Kind", **kwargs)
    assert "of enum Kind" in str(exc_info.value)
