"""
YAML/JSON document helpers shared by the board, mix, result and config loaders.

The format is chosen from the file suffix: ``.json`` is read with json,
``.yaml``/``.yml`` (and anything else) with yaml.safe_load, which also
accepts plain JSON.
"""

import json
from pathlib import Path
from typing import Any, Union

import yaml


JSON_SUFFIXES = ('.json',)


def load_document(path: Union[str, Path]) -> Any:
    """
    Parse a YAML or JSON file.

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if the file cannot be parsed
    """
    path = Path(path)
    with open(path, 'r') as f:
        text = f.read()
    try:
        if path.suffix.lower() in JSON_SUFFIXES:
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Cannot parse {path}: {e}") from e


def save_document(data: Any, path: Union[str, Path]) -> None:
    """Write ``data`` as JSON or YAML depending on the suffix."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        if path.suffix.lower() in JSON_SUFFIXES:
            json.dump(data, f, indent=2)
        else:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
