"""
Enum lowerer deriving constants from enum values.

Each value yields one constant named after the enclosing declaration and
the value's display label (the parallel enumNames entry when present).
Identifiers that collide after casing are emitted as they are.
"""

from __future__ import annotations

import json
from typing import Any

from ..errors import EmptyEnumLabelError, UnsupportedEnumTypeError
from ..schema_ast.nodes import EnumNode
from .ir_nodes import EnumDef, EnumMember, ScalarKind
from .type_resolver import TypeResolver


def format_float(value: float) -> str:
    """Shortest text that round-trips the float, without a trailing ".0"."""
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text


class EnumLowerer:
    """Lowers enum expressions to an underlying type and constants."""

    def __init__(self, resolver: TypeResolver):
        self.resolver = resolver

    def lower(self, declaration_name: str, node: EnumNode) -> EnumDef:
        """
        Lower an enum.

        Args:
            declaration_name: Identifier of the enclosing declaration (already cased)
            node: The enum expression

        Returns:
            EnumDef with the underlying scalar and one member per value

        Raises:
            UnsupportedEnumTypeError: If the enum is not over integer, number or string
            EmptyEnumLabelError: If a value or its display name is empty
        """
        underlying = self.resolver.resolve_enum(node)

        members = []
        for i, value in enumerate(node.values):
            label, literal = self._render(underlying.kind, value, node)
            if node.names and i < len(node.names):
                label = node.names[i]
            if not label:
                raise EmptyEnumLabelError(f"value {value!r} at position {i} of enum {declaration_name} at {node.source_path or 'unknown location'} has an empty label")
            members.append(
                EnumMember(
                    name=declaration_name + self.resolver.caser.case(label),
                    value=value,
                    literal=literal,
                )
            )

        return EnumDef(name=declaration_name, underlying=underlying, members=members)

    def _render(self, kind: ScalarKind, value: Any, node: EnumNode) -> tuple[str, str]:
        """Render a value as (display label, source literal)."""
        if kind is ScalarKind.INTEGER:
            if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
                raise UnsupportedEnumTypeError(f"value {value!r} of integer enum at {node.source_path or 'unknown location'} is not an integer")
            text = str(int(value))
            return text, text

        if kind is ScalarKind.NUMBER:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise UnsupportedEnumTypeError(f"value {value!r} of number enum at {node.source_path or 'unknown location'} is not a number")
            return format_float(value), repr(float(value))

        if not isinstance(value, str):
            raise UnsupportedEnumTypeError(f"value {value!r} of string enum at {node.source_path or 'unknown location'} is not a string")
        return value, json.dumps(value)
