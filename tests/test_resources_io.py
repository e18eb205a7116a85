"""Tests for resources/io.py - declaration files."""

import json
from pathlib import Path

import pytest
import yaml

from unattend_iso.resources.io import (
    load_declarations,
    load_json,
    load_yaml,
    parse_declarations,
)


class TestParseDeclarations:
    """Tests for parse_declarations function."""

    def test_nested_under_resources(self) -> None:
        """Declarations may be nested under 'resources'."""
        data = {"resources": {"answer": {"file_name": "a.iso"}}}
        assert parse_declarations(data) == {"answer": {"file_name": "a.iso"}}

    def test_flat_mapping(self) -> None:
        """Declarations may be a flat mapping."""
        data = {"answer": {"file_name": "a.iso"}}
        assert parse_declarations(data) == {"answer": {"file_name": "a.iso"}}

    def test_empty_entry(self) -> None:
        """An entry without attributes becomes an empty mapping."""
        assert parse_declarations({"answer": None}) == {"answer": {}}

    def test_non_mapping_entry(self) -> None:
        """Entries must be mappings."""
        with pytest.raises(ValueError, match="answer"):
            parse_declarations({"answer": ["a.iso"]})

    def test_non_mapping_resources(self) -> None:
        """'resources' must be a mapping."""
        with pytest.raises(ValueError, match="resources"):
            parse_declarations({"resources": ["a"]})


class TestLoaders:
    """Tests for file loaders."""

    def test_load_yaml(self, tmp_path: Path) -> None:
        """YAML files load into a dict."""
        path = tmp_path / "r.yaml"
        path.write_text("resources:\n  answer:\n    file_name: a.iso\n")
        assert load_yaml(path) == {"resources": {"answer": {"file_name": "a.iso"}}}

    def test_load_yaml_empty(self, tmp_path: Path) -> None:
        """An empty YAML file loads as an empty dict."""
        path = tmp_path / "r.yaml"
        path.write_text("")
        assert load_yaml(path) == {}

    def test_load_yaml_not_mapping(self, tmp_path: Path) -> None:
        """A YAML list is rejected."""
        path = tmp_path / "r.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_yaml(path)

    def test_load_yaml_invalid(self, tmp_path: Path) -> None:
        """Malformed YAML raises a YAML error."""
        path = tmp_path / "r.yaml"
        path.write_text("a: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_yaml(path)

    def test_load_json_not_object(self, tmp_path: Path) -> None:
        """A JSON array is rejected."""
        path = tmp_path / "r.json"
        path.write_text("[]")
        with pytest.raises(ValueError):
            load_json(path)

    def test_load_declarations_by_extension(self, tmp_path: Path) -> None:
        """JSON and YAML files both produce declarations."""
        decl = {"answer": {"file_name": "a.iso", "xml_content": "<x/>"}}
        json_path = tmp_path / "r.json"
        json_path.write_text(json.dumps({"resources": decl}))
        yaml_path = tmp_path / "r.yml"
        yaml_path.write_text(yaml.safe_dump(decl))

        assert load_declarations(json_path) == decl
        assert load_declarations(yaml_path) == decl

    def test_multiline_xml(self, tmp_path: Path) -> None:
        """Block scalars keep the payload intact."""
        path = tmp_path / "r.yaml"
        path.write_text(
            "answer:\n"
            "  file_name: a.iso\n"
            "  xml_content: |\n"
            "    <unattend>\n"
            "      <settings/>\n"
            "    </unattend>\n"
        )
        decl = load_declarations(path)
        assert decl["answer"]["xml_content"] == (
            "<unattend>\n  <settings/>\n</unattend>\n"
        )
