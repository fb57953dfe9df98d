"""
AST (Abstract Syntax Tree) node definitions for the API schema.

These nodes represent the parsed structure of the objects, responses and
methods documents before any type resolution. The node set is closed:
every consumer dispatches over exactly these kinds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SchemaNode:
    """Base class for all AST nodes."""

    # Human-readable description, carried into output as a comment
    description: str | None = None

    # Location in the schema document (for error messages)
    source_path: str = ""


@dataclass
class PrimitiveNode(SchemaNode):
    """A base kind: integer, number, string, boolean, object (without properties) or unknown."""

    type_name: str = ""


@dataclass
class RefNode(SchemaNode):
    """A reference to a named definition."""

    target: str = ""  # Definition name, e.g. "users_user_full"
    document: str = ""  # Document the definition lives in, e.g. "objects.json"


@dataclass
class ArrayNode(SchemaNode):
    """An array of elements of one type."""

    items: SchemaNode | None = None


@dataclass
class EnumNode(SchemaNode):
    """An enumeration over a base kind."""

    base_type: str = ""  # "integer", "number", "string" (anything else is rejected on resolution)
    values: list[Any] = field(default_factory=list)
    names: list[str] | None = None  # Parallel display names from enumNames


@dataclass
class PropertyDef(SchemaNode):
    """A named property of an object."""

    name: str = ""
    type_node: SchemaNode | None = None


@dataclass
class ObjectNode(SchemaNode):
    """An object shape with ordered properties."""

    properties: list[PropertyDef] = field(default_factory=list)
    required: list[str] = field(default_factory=list)


@dataclass
class CompositionNode(SchemaNode):
    """Base class for allOf/oneOf compositions."""

    branches: list[SchemaNode] = field(default_factory=list)


@dataclass
class AllOfNode(CompositionNode):
    """Intersection of branches (allOf)."""


@dataclass
class OneOfNode(CompositionNode):
    """Union of branches (oneOf/anyOf)."""


@dataclass
class NamedDefinition:
    """An entry of the objects or responses document."""

    name: str = ""
    body: SchemaNode | None = None
    description: str | None = None
    document: str = ""


@dataclass
class MethodParameter:
    """A parameter of a method."""

    name: str = ""
    body: SchemaNode | None = None
    description: str | None = None


@dataclass
class MethodResponse:
    """A named response variant of a method (e.g. "response", "extendedResponse")."""

    name: str = ""
    body: SchemaNode | None = None


@dataclass
class MethodDefinition:
    """An entry of the methods document."""

    name: str = ""
    description: str | None = None
    parameters: list[MethodParameter] = field(default_factory=list)
    responses: list[MethodResponse] = field(default_factory=list)


@dataclass
class SchemaDocuments:
    """The three parsed documents of one generation run."""

    objects: list[NamedDefinition] = field(default_factory=list)
    responses: list[NamedDefinition] = field(default_factory=list)
    methods: list[MethodDefinition] = field(default_factory=list)
