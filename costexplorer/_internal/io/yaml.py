# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""YAML helpers behind the costexplorer.yaml project file.

- load_yaml(): read one mapping, expanding ${VAR}/$VAR references
- expand_env_vars(): expansion on already-loaded data

Inputs are never mutated and os.environ is only read.
"""

import os
from pathlib import Path
from typing import Any

import yaml


def load_yaml(file_path: str | Path, expand_env: bool = True) -> dict[str, Any]:
    """Read a YAML file whose top level is a mapping.

    An empty file reads as ``{}``.

    Raises:
        FileNotFoundError: If the file is missing
        yaml.YAMLError: On a syntax error or a non-mapping top level
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise yaml.YAMLError(
            f"{path} must hold a mapping of settings, found a {type(data).__name__}"
        )
    return expand_env_vars(data) if expand_env else data


def expand_env_vars(data: Any) -> Any:
    """Expand environment references in every string of nested dicts and lists.

    Unset variables are left as written, e.g. ``"${MISSING}"``.
    """
    if isinstance(data, dict):
        return {key: expand_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    if isinstance(data, str):
        return os.path.expandvars(data)
    return data
