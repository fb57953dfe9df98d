"""
Formatter interface for generated units.

A formatter runs after patching and before writing. It only re-lays out
the text of a unit; a unit it cannot handle is passed through unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..config import FormatterConfig


class Formatter(ABC):
    """Post-processing step applied to each emitted unit."""

    # Value of FormatterConfig.tool selecting this formatter
    name: str = ""

    @abstractmethod
    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Re-layout one unit.

        Args:
            code: Source text of the unit, already patched
            config: Line length, target version and quoting options

        Returns:
            The formatted unit, or `code` itself when the tool is missing or fails
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool can be run in this environment."""
