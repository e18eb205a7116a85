"""Declaration file loading.

A declaration file is a YAML or JSON mapping of resource address to
declared attributes, optionally nested under a top-level ``resources`` key:

    resources:
      answer:
        file_name: answer.iso
        xml_content: "<unattend/>"
        path_override: /srv/iso/
"""

import json
from pathlib import Path
from typing import Any

import yaml


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the content is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data


def load_json(path: Path) -> dict[str, Any]:
    """Load a JSON file and return its contents as a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the content is not an object.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_declarations(data: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Extract address -> attributes from loaded file content.

    Raises:
        ValueError: If a resource entry is not a mapping.
    """
    resources = data["resources"] if "resources" in data else data
    if not isinstance(resources, dict):
        raise ValueError("'resources' must be a mapping of address to attributes")

    declarations: dict[str, dict[str, Any]] = {}
    for address, attributes in resources.items():
        if attributes is None:
            attributes = {}
        if not isinstance(attributes, dict):
            raise ValueError(
                f"Resource '{address}' must be a mapping, "
                f"got {type(attributes).__name__}"
            )
        declarations[str(address)] = attributes
    return declarations


def load_declarations(path: Path) -> dict[str, dict[str, Any]]:
    """Load declarations from a YAML or JSON file.

    The format is chosen by file extension; anything other than .json is
    parsed as YAML.
    """
    if path.suffix.lower() == ".json":
        data = load_json(path)
    else:
        data = load_yaml(path)
    return parse_declarations(data)


__all__ = ["load_declarations", "load_json", "load_yaml", "parse_declarations"]
