"""
Patch engine applying field type overrides to emitted units.

Some schema defects cannot be fixed upstream, so a per-unit table names
(declaration, field, replacement type) triples. The engine locates each
field's annotation with the ast module and swaps only its source text;
everything else in the unit is left byte for byte as emitted.
"""

from __future__ import annotations

import ast
import logging

from ..errors import OutputWriteError, PatchTargetNotFoundError

logger = logging.getLogger(__name__)


class PatchEngine:
    """Applies configured type replacements to emitted source text."""

    def __init__(self, rules: dict[str, dict[str, dict[str, str]]] | None = None):
        """
        Initialize the engine.

        Args:
            rules: unit -> declaration -> field -> replacement type text
        """
        self.rules = rules or {}

    def rules_for(self, unit: str) -> dict[str, dict[str, str]]:
        """Rules for one unit; units without an entry have none."""
        return self.rules.get(unit, {})

    def apply(self, unit: str, source: str) -> str:
        """
        Apply the unit's rules to its source.

        Args:
            unit: Output unit the source belongs to
            source: Emitted source text

        Returns:
            The patched source; unchanged when the unit has no rules

        Raises:
            PatchTargetNotFoundError: If a rule names a declaration or field
                that the unit does not contain
        """
        rules = self.rules_for(unit)
        if not rules:
            return source

        try:
            tree = ast.parse(source)
        except SyntaxError as e:
            raise OutputWriteError(f"cannot parse emitted unit for patching: {e}", stage=unit) from e

        lines = source.split("\n")
        edits = []
        for declaration, fields in rules.items():
            class_node = self._find_class(tree, declaration)
            if class_node is None:
                raise PatchTargetNotFoundError(f"declaration {declaration!r} not found", entity=declaration, stage=unit)

            for field_name, replacement in fields.items():
                annotation = self._find_annotation(class_node, field_name)
                if annotation is None:
                    raise PatchTargetNotFoundError(f"field {declaration}.{field_name} not found", entity=declaration, stage=unit)
                edits.append((self._span(lines, annotation), replacement))
                logger.debug("Patching %s.%s in %s to %s", declaration, field_name, unit, replacement)

        # Apply from the end so earlier spans stay valid
        for (start, end), replacement in sorted(edits, reverse=True):
            line_no, start_col = start
            end_line, end_col = end
            if line_no == end_line:
                line = lines[line_no]
                lines[line_no] = line[:start_col] + replacement + line[end_col:]
            else:
                head = lines[line_no][:start_col]
                tail = lines[end_line][end_col:]
                lines[line_no : end_line + 1] = [head + replacement + tail]

        return "\n".join(lines)

    def _find_class(self, tree: ast.Module, name: str) -> ast.ClassDef | None:
        for node in ast.walk(tree):
            if isinstance(node, ast.ClassDef) and node.name == name:
                return node
        return None

    def _find_annotation(self, class_node: ast.ClassDef, field_name: str) -> ast.expr | None:
        for item in class_node.body:
            if isinstance(item, ast.AnnAssign) and isinstance(item.target, ast.Name) and item.target.id == field_name:
                return item.annotation
        return None

    def _span(self, lines: list[str], node: ast.expr) -> tuple[tuple[int, int], tuple[int, int]]:
        """Character span of a node as ((line, col), (end line, end col)), zero based."""
        start_line = node.lineno - 1
        end_line = node.end_lineno - 1
        start_col = self._char_offset(lines[start_line], node.col_offset)
        end_col = self._char_offset(lines[end_line], node.end_col_offset)
        return (start_line, start_col), (end_line, end_col)

    @staticmethod
    def _char_offset(line: str, byte_offset: int) -> int:
        # ast reports UTF-8 byte offsets
        return len(line.encode("utf-8")[:byte_offset].decode("utf-8"))
