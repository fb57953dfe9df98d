"""
Base class for code generation backends.

Sets up the Jinja2 templates and tracks the imports a unit needs while
its declarations are rendered.
"""

from __future__ import annotations

import collections
from abc import ABC, abstractmethod
from pathlib import Path

import jinja2

from ..config import CodeGeneratorConfig


def one_line(text: str) -> str:
    """Collapse a description to a single line."""
    return " ".join(text.split())


def docstring_text(text: str) -> str:
    """Escape text for use inside a triple-quoted docstring."""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text = text[:-1] + '\\"'
    return text


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # Modules imported from the standard library
    STDLIB_MODULES = {"__future__", "abc", "collections", "dataclasses", "enum", "typing"}

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self.python_imports: set[tuple[str, str]] = set()
        self.star_imports: set[str] = set()
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
        )

    def get_template(self, name: str) -> jinja2.Template:
        return self.jinja_env.get_template(f"{name}.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def emit(self, unit: str) -> str:
        """
        Emit the source text of one output unit.

        Args:
            unit: Output unit name

        Returns:
            Generated code as a string
        """

    def reset_imports(self) -> None:
        self.python_imports = set()
        self.star_imports = set()

    def add_import(self, module: str, name: str) -> None:
        self.python_imports.add((module, name))

    def assemble_imports(self) -> list[str]:
        """Render import lines grouped as future, standard library, third party and local.

        Groups are separated by an empty string.
        """
        import_groups: dict[str, set[str]] = collections.defaultdict(set)
        for module, name in self.python_imports:
            import_groups[module].add(name)

        future, stdlib, third_party, local = [], [], [], []
        for module in sorted(import_groups):
            line = f"from {module} import {', '.join(sorted(import_groups[module]))}"
            if module == "__future__":
                future.append(line)
            elif module.startswith("."):
                local.append((module, line))
            elif module.split(".")[0] in self.STDLIB_MODULES:
                stdlib.append(line)
            else:
                third_party.append(line)

        for module in self.star_imports:
            local.append((module, f"from {module} import *  # noqa: F403"))
        local_lines = [line for _, line in sorted(local)]

        lines: list[str] = []
        for group in (future, stdlib, third_party, local_lines):
            if not group:
                continue
            if lines:
                lines.append("")
            lines.extend(group)
        return lines
