"""Read contract documents from disk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

import yaml


def load_contract(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a JSON or YAML contract document into a raw mapping.

    The mapping is not validated here; pass it to the integrity checker.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the document cannot be parsed or is not a mapping
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")

    if path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    else:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(
            f"Contract document {path} must be a mapping, got {type(data).__name__}"
        )
    return data
