"""
Branch merger reconciling fields across allOf/oneOf branches.

The merged composite carries the union of all branch fields. A field
contributed by branches that agree on its shape keeps that shape; a field
whose branches disagree becomes an opaque value decoded at run time.
Every merged field is nullable: no branch guarantees its presence.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from ..errors import MalformedCompositionError
from ..schema_ast.nodes import (
    ArrayNode,
    CompositionNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaNode,
)
from .ir_nodes import CompositeField, CompositeType, NullableType, OpaqueType

if TYPE_CHECKING:
    from .type_resolver import TypeResolver


def structurally_equal(a: SchemaNode | None, b: SchemaNode | None) -> bool:
    """Compare two expressions by shape, ignoring descriptions and source locations."""
    if a is None or b is None:
        return a is b

    if isinstance(a, RefNode) and isinstance(b, RefNode):
        return a.target == b.target

    if isinstance(a, EnumNode) and isinstance(b, EnumNode):
        return a.base_type == b.base_type and a.values == b.values and a.names == b.names

    if isinstance(a, ArrayNode) and isinstance(b, ArrayNode):
        return structurally_equal(a.items, b.items)

    if isinstance(a, PrimitiveNode) and isinstance(b, PrimitiveNode):
        return a.type_name == b.type_name

    if isinstance(a, ObjectNode) and isinstance(b, ObjectNode):
        if [p.name for p in a.properties] != [p.name for p in b.properties]:
            return False
        return all(structurally_equal(pa.type_node, pb.type_node) for pa, pb in zip(a.properties, b.properties))

    if isinstance(a, CompositionNode) and isinstance(b, CompositionNode):
        if type(a) is not type(b) or len(a.branches) != len(b.branches):
            return False
        return all(structurally_equal(ba, bb) for ba, bb in zip(a.branches, b.branches))

    return False


class BranchMerger:
    """Merges the branches of a composition into one composite."""

    def __init__(self, resolver: TypeResolver):
        self.resolver = resolver
        # Branch lists currently being merged, outermost first
        self._merging: list[int] = []

    def merge(self, branches: list[SchemaNode]) -> CompositeType:
        """
        Merge composition branches into a composite descriptor.

        Args:
            branches: The allOf/oneOf branches, in document order

        Returns:
            Composite whose fields are sorted by schema name

        Raises:
            MalformedCompositionError: For reference-to-reference branches,
                inline branches without properties, cyclic compositions and
                compositions contributing no field at all
        """
        # A composition reached again through one of its own fields never terminates
        if id(branches) in self._merging:
            origins = ", ".join(self.describe_branches(branches))
            raise MalformedCompositionError(f"composition of ({origins}) contains itself through a field")

        self._merging.append(id(branches))
        try:
            return self._merge(branches)
        finally:
            self._merging.pop()

    def _merge(self, branches: list[SchemaNode]) -> CompositeType:
        contributions = self.extract_fields(branches)
        if not contributions:
            raise MalformedCompositionError("composition contributes no fields")

        fields = []
        for name in sorted(contributions):
            nodes = contributions[name]
            first = nodes[0]
            if all(structurally_equal(nodes[i - 1], nodes[i]) for i in range(1, len(nodes))):
                field_type = NullableType(self.resolver.resolve(first))
                description = first.description
            else:
                # Branches disagree on the shape; leave it to decode time
                field_type = OpaqueType()
                description = None

            fields.append(
                CompositeField(
                    name=self.resolver.caser.case(name),
                    schema_name=name,
                    type=field_type,
                    description=description,
                    omit_empty=True,
                )
            )

        return CompositeType(fields=tuple(fields), origins=tuple(self.describe_branches(branches)))

    def extract_fields(self, branches: list[SchemaNode]) -> dict[str, list[SchemaNode]]:
        """Map each field name to its contributing expressions, in arrival order."""
        fields: dict[str, list[SchemaNode]] = {}
        for name, node in self._flatten(branches, ()):
            fields.setdefault(name, []).append(node)
        return fields

    def _flatten(self, branches: list[SchemaNode], trail: tuple[str, ...]) -> Iterator[tuple[str, SchemaNode]]:
        for branch in branches:
            if isinstance(branch, RefNode):
                definition = self.resolver.index.resolve(branch)
                body = definition.body

                if isinstance(body, CompositionNode):
                    if definition.name in trail:
                        chain = " -> ".join((*trail, definition.name))
                        raise MalformedCompositionError(f"cyclic composition: {chain}")
                    yield from self._flatten(body.branches, (*trail, definition.name))
                    continue

                if isinstance(body, RefNode):
                    raise MalformedCompositionError(f"branch {definition.name!r} is a reference to {body.target!r}; reference-to-reference branches are not supported")

                if isinstance(body, ObjectNode):
                    for prop in body.properties:
                        yield prop.name, self._property_node(prop.type_node)
                continue

            if not isinstance(branch, ObjectNode) or not branch.properties:
                raise MalformedCompositionError(f"inline branch at {branch.source_path or 'unknown location'} has no properties")

            for prop in branch.properties:
                yield prop.name, self._property_node(prop.type_node)

    def _property_node(self, node: SchemaNode | None) -> SchemaNode:
        return node if node is not None else PrimitiveNode()

    def describe_branches(self, branches: list[SchemaNode]) -> list[str]:
        """Describe the originating branches for traceability."""
        origins = []
        for branch in branches:
            if isinstance(branch, RefNode):
                origins.append(branch.target)
            elif isinstance(branch, ObjectNode):
                origins.append("{" + ", ".join(prop.name for prop in branch.properties) + "}")
            else:
                origins.append(type(branch).__name__)
        return origins
