"""
Pipeline generator driving one generation run.

Each output unit goes through emit, patch, format and write in turn.
Units are processed one after another; the first failure stops the run
and no later unit is attempted.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from .backends import PythonBackend
from .config import UNITS, CodeGeneratorConfig
from .errors import GenerationError, SchemaLoadError
from .formatters import get_formatter
from .patcher import AtomicWriter, PatchEngine
from .schema_ast import SchemaDocuments, SchemaParser

logger = logging.getLogger(__name__)


def load_documents(schema_dir: str | Path) -> SchemaDocuments:
    """
    Load and parse the objects, responses and methods documents.

    Args:
        schema_dir: Directory holding objects.json, responses.json and methods.json

    Returns:
        The parsed documents

    Raises:
        SchemaLoadError: If a document cannot be read or is not JSON
        SchemaParseError: If a document does not have the expected shape
    """
    schema_dir = Path(schema_dir)
    raw = {}
    for key, filename in (
        ("objects", SchemaParser.OBJECTS_DOCUMENT),
        ("responses", SchemaParser.RESPONSES_DOCUMENT),
        ("methods", SchemaParser.METHODS_DOCUMENT),
    ):
        path = schema_dir / filename
        try:
            with open(path, encoding="utf-8") as f:
                raw[key] = json.load(f)
        except OSError as e:
            raise SchemaLoadError(f"cannot read {path}: {e.strerror or e}", entity=filename) from e
        except json.JSONDecodeError as e:
            raise SchemaLoadError(f"{path} is not valid JSON: {e}", entity=filename) from e
        logger.debug("Loaded %s", path)

    return SchemaParser().parse(**raw)


class PipelineGenerator:
    """Generates the output units of one schema set."""

    def __init__(self, documents: SchemaDocuments, config: CodeGeneratorConfig | None = None):
        """
        Initialize the generator.

        Args:
            documents: Parsed schema documents
            config: Generation configuration (defaults apply when omitted)
        """
        self.config = config or CodeGeneratorConfig()
        self.documents = documents
        self.backend = PythonBackend(self.config, documents)
        self.patcher = PatchEngine(self.config.patch_rules)
        self.formatter = get_formatter(self.config.formatter) if self.config.formatter.enabled else None
        self.writer = AtomicWriter(atomic=self.config.output.atomic_write)

    @classmethod
    def from_directory(cls, schema_dir: str | Path, config: CodeGeneratorConfig | None = None) -> PipelineGenerator:
        """Create a generator for the documents in a schema directory."""
        return cls(load_documents(schema_dir), config)

    def generate_unit(self, unit: str) -> str:
        """
        Emit, patch and format one unit.

        Args:
            unit: Output unit name

        Returns:
            The unit's final source text

        Raises:
            GenerationError: With the unit attached as the stage
        """
        logger.info("Generating %s", unit)
        try:
            code = self.backend.emit(unit)
            code = self.patcher.apply(unit, code)
        except GenerationError as e:
            raise e.with_context(stage=unit)

        if self.formatter is not None:
            code = self.formatter.format(code, self.config.formatter)
        return code

    def generate(self, units: Iterable[str] = UNITS) -> dict[str, str]:
        """Generate units in order without writing them."""
        return {unit: self.generate_unit(unit) for unit in units}

    def write(self, output_dir: str | Path, units: Iterable[str] = UNITS) -> list[Path]:
        """
        Generate and write units to `<output_dir>/<unit>.py`.

        A unit is written only after it has been fully generated and
        validated, so a failure leaves no partial file for that unit.

        Args:
            output_dir: Directory receiving the units
            units: Units to generate, in order

        Returns:
            Paths of the written files

        Raises:
            GenerationError: On the first failing unit
        """
        output_dir = Path(output_dir)
        written = []
        for unit in units:
            code = self.generate_unit(unit)
            path = output_dir / f"{unit}.py"
            try:
                self.writer.write(path, code, validate=self.config.output.validate_before_write)
            except GenerationError as e:
                raise e.with_context(entity=path.name, stage=unit)
            logger.info("Wrote %s", path)
            written.append(path)
        return written
