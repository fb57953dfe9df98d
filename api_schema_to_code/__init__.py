"""API Schema to Code Generator

A Python package for generating typed API bindings from an API schema
made of objects, responses and methods documents: dataclasses for objects
and responses, call wrappers, request builders and request records.
"""

__version__ = "1.0.0"

from .pipeline import (
    AtomicWriter,
    CodeGeneratorConfig,
    FormatterConfig,
    GenerationError,
    OutputConfig,
    PatchEngine,
    PipelineGenerator,
    load_documents,
)

__all__ = [
    "PipelineGenerator",
    "load_documents",
    "CodeGeneratorConfig",
    "FormatterConfig",
    "OutputConfig",
    "GenerationError",
    "PatchEngine",
    "AtomicWriter",
]
