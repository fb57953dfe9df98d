"""
Analyzer module.

Resolves schema expressions into type descriptors: identifier casing,
reference lookup, type resolution, branch merging and enum lowering.
"""

from __future__ import annotations

from .branch_merger import BranchMerger, structurally_equal
from .enum_lowerer import EnumLowerer
from .ir_nodes import (
    CompositeField,
    CompositeType,
    EnumDef,
    EnumMember,
    LiteralType,
    NamedType,
    NullableType,
    OpaqueType,
    ScalarKind,
    ScalarType,
    SequenceType,
    TypeDescriptor,
)
from .name_resolver import IdentifierCaser, escape_keyword
from .reference_resolver import DefinitionIndex
from .type_resolver import TypeResolver

__all__ = [
    "BranchMerger",
    "structurally_equal",
    "EnumLowerer",
    "CompositeField",
    "CompositeType",
    "EnumDef",
    "EnumMember",
    "LiteralType",
    "NamedType",
    "NullableType",
    "OpaqueType",
    "ScalarKind",
    "ScalarType",
    "SequenceType",
    "TypeDescriptor",
    "IdentifierCaser",
    "escape_keyword",
    "DefinitionIndex",
    "TypeResolver",
]
