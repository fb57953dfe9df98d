"""
Atomic file writer for generated units.

A unit is written to a temporary file next to its target, validated and
only then moved into place, so an interrupted or failed write never
leaves a partial unit behind.
"""

from __future__ import annotations

import ast
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import OutputWriteError


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(self, validate: Callable[[str], None] | None = None, atomic: bool = True):
        """Initialize the atomic writer.

        Args:
            validate: Optional validation function for the written code
            atomic: When False the target is written in place
        """
        self._validate = validate or self._default_validate
        self.atomic = atomic

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            OutputWriteError: If validation or a file operation fails
        """
        if validate:
            self._validate(content)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if not self.atomic:
                path.write_text(content, encoding="utf-8")
                return

            # Same directory ensures atomic rename on the same filesystem
            temp_fd, temp_path_str = tempfile.mkstemp(
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                text=True,
            )
        except OSError as e:
            raise OutputWriteError(f"cannot write {path}: {e}") from e

        temp_path = Path(temp_path_str)
        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
            temp_path.replace(path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise OutputWriteError(f"cannot write {path}: {e}") from e

    def _default_validate(self, content: str) -> None:
        """Check that the content parses as Python.

        Raises:
            OutputWriteError: If the content is not valid Python
        """
        try:
            ast.parse(content)
        except SyntaxError as e:
            raise OutputWriteError(f"generated code is not valid Python: {e}") from e
