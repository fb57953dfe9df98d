"""
Tests for the pipeline generator: loading, unit sequencing and writing.
"""

from __future__ import annotations

import ast
import json
import shutil
from pathlib import Path

import pytest

from api_schema_to_code.pipeline import (
    UNITS,
    CodeGeneratorConfig,
    FormatterConfig,
    OutputWriteError,
    PatchTargetNotFoundError,
    PipelineGenerator,
    SchemaLoadError,
    SchemaParseError,
    load_documents,
)

SCHEMA_DIR = Path(__file__).parent / "test_data" / "vk_sample"


def make_config(**kwargs):
    return CodeGeneratorConfig(formatter=FormatterConfig(enabled=False), **kwargs)


def test_load_documents():
    """The three documents are loaded and parsed."""
    documents = load_documents(SCHEMA_DIR)
    assert [d.name for d in documents.objects][:3] == ["base_bool_int", "base_sex", "users_friend_ids"]
    assert [d.name for d in documents.responses][0] == "users_get_response"
    assert [m.name for m in documents.methods] == ["users.get", "friends.get", "messages.delete", "account.setOnline"]


def test_load_documents_missing_file(tmp_path):
    """A missing document is a load error naming the file."""
    shutil.copy(SCHEMA_DIR / "objects.json", tmp_path / "objects.json")
    with pytest.raises(SchemaLoadError) as exc_info:
        load_documents(tmp_path)
    assert exc_info.value.entity == "responses.json"


def test_load_documents_invalid_json(tmp_path):
    """A document that is not JSON is a load error."""
    for name in ("objects.json", "responses.json", "methods.json"):
        shutil.copy(SCHEMA_DIR / name, tmp_path / name)
    (tmp_path / "methods.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(SchemaLoadError) as exc_info:
        load_documents(tmp_path)
    assert exc_info.value.entity == "methods.json"


def test_load_documents_wrong_shape(tmp_path):
    """A document without definitions is a parse error."""
    for name in ("objects.json", "responses.json", "methods.json"):
        shutil.copy(SCHEMA_DIR / name, tmp_path / name)
    (tmp_path / "objects.json").write_text(json.dumps({"objects": {}}), encoding="utf-8")
    with pytest.raises(SchemaParseError):
        load_documents(tmp_path)


def test_generate_all_units():
    """generate() returns every unit in order."""
    generator = PipelineGenerator.from_directory(SCHEMA_DIR, make_config())
    units = generator.generate()
    assert list(units) == list(UNITS)
    for code in units.values():
        ast.parse(code)


def test_write_all_units(tmp_path):
    """Each unit is written to <unit>.py and no temporary file is left."""
    generator = PipelineGenerator.from_directory(SCHEMA_DIR, make_config())
    written = generator.write(tmp_path / "out")

    assert [p.name for p in written] == [f"{unit}.py" for unit in UNITS]
    assert sorted(p.name for p in (tmp_path / "out").iterdir()) == sorted(f"{unit}.py" for unit in UNITS)
    for path in written:
        ast.parse(path.read_text(encoding="utf-8"))


def test_write_applies_patches(tmp_path):
    """Configured patches are applied before writing."""
    config = make_config(patch_rules={"objects": {"UsersUserMin": {"Deactivated": "int | None"}}})
    PipelineGenerator.from_directory(SCHEMA_DIR, config).write(tmp_path)

    objects = (tmp_path / "objects.py").read_text(encoding="utf-8")
    assert '    Deactivated: int | None = field(default=None, metadata=config(field_name="deactivated", exclude=_omit_empty))' in objects


def test_failing_patch_stops_the_run(tmp_path):
    """A failing unit is not written and later units are not attempted."""
    (tmp_path / "responses.py").write_text("old = True\n", encoding="utf-8")
    config = make_config(patch_rules={"responses": {"Missing": {"Field": "int"}}})
    generator = PipelineGenerator.from_directory(SCHEMA_DIR, config)

    with pytest.raises(PatchTargetNotFoundError) as exc_info:
        generator.write(tmp_path)
    assert exc_info.value.stage == "responses"
    assert exc_info.value.entity == "Missing"

    assert (tmp_path / "objects.py").exists()
    assert (tmp_path / "responses.py").read_text(encoding="utf-8") == "old = True\n"
    assert not (tmp_path / "methods.py").exists()
    assert [p.name for p in tmp_path.iterdir() if p.name.endswith(".tmp")] == []


def test_invalid_output_is_not_written(tmp_path):
    """A unit that is not valid Python after patching is rejected before writing."""
    config = make_config(patch_rules={"objects": {"UsersUserMin": {"Deactivated": "int |"}}})
    generator = PipelineGenerator.from_directory(SCHEMA_DIR, config)

    with pytest.raises(OutputWriteError) as exc_info:
        generator.write(tmp_path)
    assert exc_info.value.stage == "objects"
    assert not (tmp_path / "objects.py").exists()


def test_write_selected_units(tmp_path):
    """Units can be generated selectively."""
    written = PipelineGenerator.from_directory(SCHEMA_DIR, make_config()).write(tmp_path, units=["requests"])
    assert [p.name for p in written] == ["requests.py"]


def test_unknown_formatter():
    """Selecting an unknown formatter is rejected up front."""
    config = CodeGeneratorConfig(formatter=FormatterConfig(tool="yapf"))
    with pytest.raises(ValueError):
        PipelineGenerator.from_directory(SCHEMA_DIR, config)
