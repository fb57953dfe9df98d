"""
Type resolver mapping schema expressions to type descriptors.

Phase 2 of the pipeline. Resolution is recursive and pure: it never
expands another top-level definition (references stay references) and
never touches I/O. Compositions are delegated to the branch merger.
"""

from __future__ import annotations

from ..errors import UnsupportedEnumTypeError
from ..schema_ast.nodes import (
    ArrayNode,
    CompositionNode,
    EnumNode,
    NamedDefinition,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaNode,
)
from ..schema_ast.parser import SchemaParser
from .branch_merger import BranchMerger
from .ir_nodes import (
    CompositeField,
    CompositeType,
    NamedType,
    OpaqueType,
    ScalarKind,
    ScalarType,
    SequenceType,
    TypeDescriptor,
)
from .name_resolver import IdentifierCaser, escape_keyword
from .reference_resolver import DefinitionIndex


class TypeResolver:
    """Resolves schema expressions to type descriptors."""

    SCALAR_KINDS = {
        "integer": ScalarKind.INTEGER,
        "number": ScalarKind.NUMBER,
        "string": ScalarKind.STRING,
        "boolean": ScalarKind.BOOLEAN,
    }

    # Kinds an enum may be declared over
    ENUM_KINDS = ("integer", "number", "string")

    RESPONSE_SUFFIX = "Response"

    def __init__(self, caser: IdentifierCaser, index: DefinitionIndex):
        """
        Initialize the resolver.

        Args:
            caser: Identifier caser for declaration and field names
            index: Index used to check references and flatten compositions
        """
        self.caser = caser
        self.index = index
        self.merger = BranchMerger(self)

    def resolve(self, node: SchemaNode | None) -> TypeDescriptor:
        """
        Resolve a schema expression.

        Args:
            node: The expression to resolve

        Returns:
            The resolved type descriptor

        Raises:
            GenerationError: For malformed compositions, enums over unsupported
                kinds and unresolved references
        """
        if isinstance(node, RefNode):
            return self.resolve_ref(node)

        if isinstance(node, CompositionNode):
            return self.merger.merge(node.branches)

        if isinstance(node, EnumNode):
            return self.resolve_enum(node)

        if isinstance(node, ArrayNode):
            if node.items is None:
                return SequenceType(OpaqueType())
            return SequenceType(self.resolve(node.items))

        if isinstance(node, PrimitiveNode):
            kind = self.SCALAR_KINDS.get(node.type_name)
            if kind is not None:
                return ScalarType(kind)
            return OpaqueType()

        if isinstance(node, ObjectNode) and node.properties:
            return self.resolve_object(node)

        # Objects without properties and unknown kinds have no static shape
        return OpaqueType()

    def resolve_ref(self, node: RefNode) -> NamedType:
        """Resolve a reference without expanding its target."""
        definition = self.index.resolve(node)
        return NamedType(name=self.declaration_name(definition), target=definition.name)

    def declaration_name(self, definition: NamedDefinition) -> str:
        """Identifier a named definition is declared under.

        Response declarations always end in "Response" so that references
        and declarations agree.
        """
        name = self.caser.case(definition.name)
        if definition.document == SchemaParser.RESPONSES_DOCUMENT and not name.endswith(self.RESPONSE_SUFFIX):
            name += self.RESPONSE_SUFFIX
        return escape_keyword(name)

    def resolve_enum(self, node: EnumNode) -> ScalarType:
        """Resolve an enum to the scalar it is declared over."""
        if node.base_type not in self.ENUM_KINDS:
            raise UnsupportedEnumTypeError(f"enum over {node.base_type or 'unknown'!r} at {node.source_path or 'unknown location'}; expected one of {', '.join(self.ENUM_KINDS)}")
        return ScalarType(self.SCALAR_KINDS[node.base_type])

    def resolve_object(self, node: ObjectNode) -> CompositeType:
        """Resolve an inline object to an anonymous composite, in document order."""
        fields = []
        seen = set()
        for prop in node.properties:
            if prop.name in seen:
                continue
            seen.add(prop.name)
            fields.append(
                CompositeField(
                    name=self.caser.case(prop.name),
                    schema_name=prop.name,
                    type=self.resolve(prop.type_node),
                    description=prop.description,
                )
            )
        return CompositeType(fields=tuple(fields))

    def is_self_reference(self, node: SchemaNode | None, definition_name: str) -> bool:
        """Whether a property expression refers directly to the definition being emitted."""
        return isinstance(node, RefNode) and self.index.resolve(node).name == definition_name
