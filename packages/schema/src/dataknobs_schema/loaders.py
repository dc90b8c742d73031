"""Reading YAML and JSON data files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import yaml


def load_data_file(path: Union[str, Path]) -> Any:
    """Load a ``.yaml``/``.yml`` or ``.json`` file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the extension is not supported
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()
    with open(path, encoding="utf-8") as f:
        if suffix in [".yaml", ".yml"]:
            return yaml.safe_load(f)
        elif suffix == ".json":
            return json.load(f)
        else:
            raise ValueError(f"Unsupported file format: {suffix}")
