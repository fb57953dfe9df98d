"""
Configuration for the code generator pipeline.

The configuration is passed explicitly to the generator and the
declaration emitter; nothing here is read from module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Output units, in the order they are generated
UNITS = ("objects", "responses", "methods", "methods_safe", "builders", "requests")

# Formatters FormatterConfig.tool may select
FORMATTER_TOOLS = ("ruff", "black")


@dataclass
class FormatterConfig:
    """Configuration for post-processing formatters."""

    # Whether formatting is enabled
    enabled: bool = True

    # Formatter to use ("ruff" or "black")
    tool: str = "ruff"

    # Line length for the formatter
    line_length: int = 100

    # Python version target (e.g., "py312", "py313")
    target_version: str = "py312"

    # Whether to use string normalization (convert single quotes to double)
    string_normalization: bool = True

    # Whether to respect magic trailing commas
    magic_trailing_comma: bool = True


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        validate_before_write: Whether to parse the generated unit before writing it
        atomic_write: Whether to use atomic file writes
    """

    validate_before_write: bool = True
    atomic_write: bool = True


def _default_response_overrides() -> dict[str, str]:
    return {"messages_delete_response": "dict[str, int]"}


def _default_method_postfix_prefixes() -> dict[str, str]:
    return {"StorageGetWithKeysResponse": "With"}


@dataclass
class CodeGeneratorConfig:
    """Configuration options for code generation."""

    # Convert schema names to declaration identifiers (False keeps raw names for debugging)
    case_identifiers: bool = True

    # Name of the generated package, written in every unit's docstring
    package_name: str = "generated"

    # Module providing Params and the request transport, imported by call wrapper units
    runtime_module: str = ".api"

    # Documentation link written into builder and request docstrings
    docs_url: str = "https://vk.com/dev/{method}"

    # Response name -> literal type text replacing the schema-derived type
    response_overrides: dict[str, str] = field(default_factory=_default_response_overrides)

    # Response type text -> prefix prepended to the call wrapper name postfix
    method_postfix_prefixes: dict[str, str] = field(default_factory=_default_method_postfix_prefixes)

    # unit -> declaration -> field -> replacement type text, applied after emission
    patch_rules: dict[str, dict[str, dict[str, str]]] = field(default_factory=dict)

    # Formatter configuration
    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary."""
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if k == "formatter" and isinstance(v, dict):
                config.formatter = FormatterConfig(**v)
                if config.formatter.tool not in FORMATTER_TOOLS:
                    raise ValueError(f"unknown formatter {config.formatter.tool!r}; expected one of {', '.join(FORMATTER_TOOLS)}")
            elif k == "output" and isinstance(v, dict):
                config.output = OutputConfig(**v)
            elif k == "patch_rules" and isinstance(v, dict):
                unknown = sorted(set(v) - set(UNITS))
                if unknown:
                    raise ValueError(f"patch_rules reference unknown output units: {', '.join(unknown)}")
                config.patch_rules = v
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "case_identifiers": self.case_identifiers,
            "package_name": self.package_name,
            "runtime_module": self.runtime_module,
            "docs_url": self.docs_url,
            "response_overrides": self.response_overrides,
            "method_postfix_prefixes": self.method_postfix_prefixes,
            "patch_rules": self.patch_rules,
            "formatter": {
                "enabled": self.formatter.enabled,
                "tool": self.formatter.tool,
                "line_length": self.formatter.line_length,
                "target_version": self.formatter.target_version,
                "string_normalization": self.formatter.string_normalization,
                "magic_trailing_comma": self.formatter.magic_trailing_comma,
            },
            "output": {
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }
