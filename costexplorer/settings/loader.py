# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Loading and caching of ExplorationConfig."""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError
from rich.console import Console

from costexplorer.exceptions import ConfigurationError

from .schema import ExplorationConfig

console = Console(stderr=True)

_PATH_SUFFIXES = ('_dir', '_path', '_file')


def _is_path_field(key: str) -> bool:
    """Fields named ``*_dir``, ``*_path`` or ``*_file`` hold paths."""
    return key.endswith(_PATH_SUFFIXES)


def _resolve_override_paths(overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Anchor relative path overrides at the working directory.

    A path handed over in code means the same thing as one typed in a shell,
    unlike paths in costexplorer.yaml which follow the project directory.
    """
    cwd = Path.cwd()
    resolved = dict(overrides)
    for key, value in overrides.items():
        if not _is_path_field(key) or not isinstance(value, (str, Path)):
            continue
        path = Path(value)
        resolved[key] = path if path.is_absolute() else (cwd / path).resolve()
    return resolved


def _report(error: ValidationError) -> None:
    console.print("[bold red]Configuration validation failed:[/bold red]")
    for item in error.errors():
        field = " → ".join(str(part) for part in item["loc"]) or "(root)"
        console.print(f"  [red]{field}: {item['msg']}[/red]")


def load_config(
    project_file: Optional[Path] = None,
    **overrides
) -> ExplorationConfig:
    """Build the run settings from every source.

    Keyword overrides beat COSTEXP_* environment variables, which beat
    costexplorer.yaml, which beats the built-in defaults.

    Args:
        project_file: Explicit costexplorer.yaml, skipping the directory walk
        **overrides: ExplorationConfig fields

    Raises:
        ConfigurationError: If any source holds an invalid value
    """
    overrides = _resolve_override_paths(overrides)
    if project_file is not None:
        overrides['config_file'] = Path(project_file)

    try:
        return ExplorationConfig(**overrides)
    except ValidationError as e:
        _report(e)
        raise ConfigurationError(f"Invalid exploration configuration: {e}") from e


@lru_cache(maxsize=1)
def get_config() -> ExplorationConfig:
    """Settings of this process, loaded once."""
    return load_config()


def reset_config() -> None:
    """Forget the cached settings so the next get_config() reloads them."""
    get_config.cache_clear()
