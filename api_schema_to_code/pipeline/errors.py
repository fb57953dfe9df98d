"""
Errors raised by the generation pipeline.

Every structural inconsistency is fatal: it aborts the output unit being
built and no file is written for it. The error records the stage (output
unit), the entity being emitted and the rule that was violated so the
defect can be traced back to the schema or the patch table.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for all fatal generation errors."""

    rule = "generation failed"

    def __init__(self, message: str, entity: str | None = None, stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.entity = entity
        self.stage = stage

    def with_context(self, entity: str | None = None, stage: str | None = None) -> GenerationError:
        """Fill in the entity and stage if they are not known yet."""
        if self.entity is None and entity is not None:
            self.entity = entity
        if self.stage is None and stage is not None:
            self.stage = stage
        return self

    def __str__(self) -> str:
        parts = []
        if self.stage:
            parts.append(f"[{self.stage}]")
        if self.entity:
            parts.append(f"{self.entity}:")
        parts.append(f"{self.rule}: {self.message}")
        return " ".join(parts)


class MalformedCompositionError(GenerationError):
    """An allOf/oneOf composition cannot be merged.

    Raised for reference-to-reference branches, inline branches without
    properties, cyclic composition chains and empty merge results.
    """

    rule = "malformed composition"


class UnsupportedEnumTypeError(GenerationError):
    """An enum is declared over a kind other than integer, number or string."""

    rule = "unsupported enum type"


class UnresolvedReferenceError(GenerationError):
    """A $ref names a definition that no loaded document declares."""

    rule = "unresolved reference"


class PatchTargetNotFoundError(GenerationError):
    """A configured patch rule names a declaration or field that was not emitted."""

    rule = "patch target not found"


class SchemaParseError(GenerationError):
    """A schema document does not have the expected shape."""

    rule = "invalid schema document"


class SchemaLoadError(GenerationError):
    """A schema document could not be read."""

    rule = "schema document unreadable"


class OutputWriteError(GenerationError):
    """A generated unit could not be validated or written."""

    rule = "output unwritable"


class EmptyEnumLabelError(GenerationError):
    """An enum value or its display name is empty, so no constant can be named after it."""

    rule = "empty enum label"
