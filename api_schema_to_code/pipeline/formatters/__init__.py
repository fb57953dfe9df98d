"""
Post-processing formatters for generated code.
"""

from __future__ import annotations

from ..config import FormatterConfig
from .base import Formatter
from .black_formatter import BlackFormatter
from .ruff_formatter import RuffFormatter

FORMATTERS: dict[str, type[Formatter]] = {
    RuffFormatter.name: RuffFormatter,
    BlackFormatter.name: BlackFormatter,
}


def get_formatter(config: FormatterConfig) -> Formatter:
    """Create the formatter selected by the configuration."""
    if config.tool not in FORMATTERS:
        raise ValueError(f"Unknown formatter: {config.tool}. Supported: {', '.join(sorted(FORMATTERS))}")
    return FORMATTERS[config.tool]()


__all__ = [
    "BlackFormatter",
    "Formatter",
    "FORMATTERS",
    "RuffFormatter",
    "get_formatter",
]
