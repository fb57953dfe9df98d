"""
Schema AST (Abstract Syntax Tree) module.

Contains the AST node definitions and parser for the API schema documents.
"""

from __future__ import annotations

from .nodes import (
    AllOfNode,
    ArrayNode,
    CompositionNode,
    EnumNode,
    MethodDefinition,
    MethodParameter,
    MethodResponse,
    NamedDefinition,
    ObjectNode,
    OneOfNode,
    PrimitiveNode,
    PropertyDef,
    RefNode,
    SchemaDocuments,
    SchemaNode,
)
from .parser import SchemaParser

__all__ = [
    "SchemaNode",
    "PrimitiveNode",
    "RefNode",
    "ArrayNode",
    "EnumNode",
    "PropertyDef",
    "ObjectNode",
    "CompositionNode",
    "AllOfNode",
    "OneOfNode",
    "NamedDefinition",
    "MethodParameter",
    "MethodResponse",
    "MethodDefinition",
    "SchemaDocuments",
    "SchemaParser",
]
