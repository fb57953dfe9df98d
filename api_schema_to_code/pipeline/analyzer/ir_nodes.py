"""
IR (Intermediate Representation) node definitions.

These are the resolved type descriptors produced by the type resolver,
ready for code generation. Descriptors are frozen values: two descriptors
are equal exactly when they describe the same shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ScalarKind(Enum):
    """Built-in scalar kinds."""

    INTEGER = "integer"  # 64-bit signed integer
    NUMBER = "number"  # 64-bit float
    STRING = "string"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class TypeDescriptor:
    """Base class for resolved types."""


@dataclass(frozen=True)
class ScalarType(TypeDescriptor):
    """A built-in scalar."""

    kind: ScalarKind = ScalarKind.STRING


@dataclass(frozen=True)
class NamedType(TypeDescriptor):
    """A reference to a named declaration."""

    name: str = ""  # Declaration identifier
    target: str = ""  # Definition name in the schema


@dataclass(frozen=True)
class SequenceType(TypeDescriptor):
    """A sequence of elements."""

    element: TypeDescriptor = field(default_factory=TypeDescriptor)


@dataclass(frozen=True)
class NullableType(TypeDescriptor):
    """A value that may be absent."""

    inner: TypeDescriptor = field(default_factory=TypeDescriptor)


@dataclass(frozen=True)
class OpaqueType(TypeDescriptor):
    """An untyped dynamic value, used when no shape can be derived."""


@dataclass(frozen=True)
class LiteralType(TypeDescriptor):
    """A literal type text that replaces the schema-derived type."""

    text: str = ""


@dataclass(frozen=True)
class CompositeField:
    """A field of a synthesized composite."""

    name: str = ""  # Declaration identifier
    schema_name: str = ""  # Property name used for serialization
    type: TypeDescriptor = field(default_factory=TypeDescriptor)
    description: str | None = None
    omit_empty: bool = False  # Absent values are left out when serializing


@dataclass(frozen=True)
class CompositeType(TypeDescriptor):
    """A synthesized anonymous composite with ordered fields."""

    fields: tuple[CompositeField, ...] = ()

    # Originating branches of a merged composite, for documentation only
    origins: tuple[str, ...] = field(default=(), compare=False)


@dataclass
class EnumMember:
    """A derived enum constant."""

    name: str = ""  # Constant identifier
    value: Any = None  # Literal value as found in the schema
    literal: str = ""  # Literal value rendered as source text


@dataclass
class EnumDef:
    """An enum lowered to its underlying type and constants."""

    name: str = ""
    underlying: ScalarType = field(default_factory=ScalarType)
    members: list[EnumMember] = field(default_factory=list)
