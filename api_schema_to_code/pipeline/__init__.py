"""
Pipeline - API schema to code generator.

This module lowers a three-document API schema (objects, responses,
methods) into Python source in phases:

1. Phase 1 (Parser): Parse the schema documents into a Schema AST
2. Phase 2 (Analyzer): Resolve expressions into type descriptors
3. Phase 3 (Backend): Emit one source unit per output unit
4. Phase 4 (Patcher): Apply configured field type overrides
5. Phase 5 (Formatter): Optional post-processing (ruff or black)
6. Phase 6 (Writer): Validate and write each unit atomically
"""

from __future__ import annotations

from .config import UNITS, CodeGeneratorConfig, FormatterConfig, OutputConfig
from .errors import (
    GenerationError,
    EmptyEnumLabelError,
    MalformedCompositionError,
    OutputWriteError,
    PatchTargetNotFoundError,
    SchemaLoadError,
    SchemaParseError,
    UnresolvedReferenceError,
    UnsupportedEnumTypeError,
)
from .generator import PipelineGenerator, load_documents
from .patcher import AtomicWriter, PatchEngine

__all__ = [
    "UNITS",
    "PipelineGenerator",
    "load_documents",
    "CodeGeneratorConfig",
    "FormatterConfig",
    "OutputConfig",
    "GenerationError",
    "EmptyEnumLabelError",
    "MalformedCompositionError",
    "OutputWriteError",
    "PatchTargetNotFoundError",
    "SchemaLoadError",
    "SchemaParseError",
    "UnresolvedReferenceError",
    "UnsupportedEnumTypeError",
    "AtomicWriter",
    "PatchEngine",
]
