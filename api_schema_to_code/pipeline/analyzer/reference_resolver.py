"""
Reference resolver for $ref resolution.

Named definitions are addressed by name through an index, never embedded,
so self-referential schemas need no cycle detection to be loaded.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..errors import UnresolvedReferenceError
from ..schema_ast.nodes import NamedDefinition, RefNode


class DefinitionIndex:
    """Index of named definitions across the loaded documents."""

    def __init__(self, definitions: Iterable[NamedDefinition] = ()):
        """
        Initialize the index.

        Args:
            definitions: Definitions to index, in document order
        """
        self._by_document: dict[str, dict[str, NamedDefinition]] = {}
        self._by_name: dict[str, NamedDefinition] = {}
        self.add_all(definitions)

    def add_all(self, definitions: Iterable[NamedDefinition]) -> None:
        """Index definitions; the first definition of a name wins."""
        for definition in definitions:
            self._by_document.setdefault(definition.document, {}).setdefault(definition.name, definition)
            self._by_name.setdefault(definition.name, definition)

    def resolve(self, ref_node: RefNode) -> NamedDefinition:
        """
        Resolve a $ref node to its definition.

        Args:
            ref_node: The RefNode to resolve

        Returns:
            The referenced definition

        Raises:
            UnresolvedReferenceError: If no document declares the target
        """
        definition = self._by_document.get(ref_node.document, {}).get(ref_node.target)
        if definition is None:
            definition = self._by_name.get(ref_node.target)
        if definition is None:
            location = f"{ref_node.document}#/definitions/{ref_node.target}" if ref_node.document else ref_node.target
            raise UnresolvedReferenceError(f"{location} is not defined (referenced from {ref_node.source_path or 'unknown location'})")
        return definition

    def get_definition(self, name: str) -> NamedDefinition | None:
        """Get a definition by name."""
        return self._by_name.get(name)
