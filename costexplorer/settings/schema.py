# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""costexplorer configuration schema using Pydantic.

This module defines the run settings for an exploration: where the logs go,
how long the oracle may take per query and in total, and how chatty the
console is.

Configuration Priority
----------------------
Settings are loaded from multiple sources with the following priority (highest to lowest):
1. Constructor / load_config() keyword arguments
2. Environment variables (COSTEXP_* prefix, ``__`` for nested fields)
3. Project config file (costexplorer.yaml)
4. Built-in defaults

Path Resolution
---------------
"Paths resolve relative to where they're specified":

1. **Absolute paths**: Always used as-is
2. **Relative paths from keyword arguments**: Resolve to current working directory
   (done in load_config() before ExplorationConfig is created)
3. **Relative paths from YAML/env/defaults**: Resolve to the project directory,
   i.e. the directory holding costexplorer.yaml (or CWD when there is none)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from costexplorer._internal.io.yaml import load_yaml
from costexplorer._internal.logging import LEVEL_MAP

_PROJECT_CONFIG_FILE = "costexplorer.yaml"
_PROJECT_DIR_ENV = "COSTEXP_PROJECT_DIR"


def _find_project_config() -> Path | None:
    """Locate costexplorer.yaml.

    COSTEXP_PROJECT_DIR pins the lookup to one directory. Without it the
    working directory and each of its parents are tried in turn.
    """
    pinned = os.environ.get(_PROJECT_DIR_ENV)
    if pinned:
        candidate = Path(pinned).resolve() / _PROJECT_CONFIG_FILE
        return candidate if candidate.is_file() else None

    cwd = Path.cwd().resolve()
    for directory in (cwd, *cwd.parents):
        candidate = directory / _PROJECT_CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def _yaml_error_location(error: yaml.YAMLError) -> str:
    mark = getattr(error, "problem_mark", None)
    if mark is None:
        return "unknown location"
    return f"line {mark.line + 1}, column {mark.column + 1}"


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Lowest-priority settings source: the project's costexplorer.yaml."""

    def __init__(self, settings_cls: type[BaseSettings], project_file: Path | None = None):
        super().__init__(settings_cls)
        if project_file is None:
            self.project_file_used = _find_project_config()
        else:
            self.project_file_used = project_file if project_file.is_file() else None

        self._data = self._load(self.project_file_used) if self.project_file_used else {}

    @staticmethod
    def _load(yaml_file: Path) -> dict[str, Any]:
        """Settings mapping of ``yaml_file`` with ${VAR} references expanded.

        Raises:
            yaml.YAMLError: On a syntax error, with file and position
        """
        try:
            data = load_yaml(yaml_file)
        except yaml.YAMLError as e:
            problem = getattr(e, "problem", None) or str(e)
            raise yaml.YAMLError(
                f"\n\nInvalid YAML in config file: {yaml_file}\n"
                f"{_yaml_error_location(e)}: {problem}\n"
            ) from e
        return data

    def get_field_value(self, field_name: str, field_info: Any) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class LoggingConfig(BaseModel):
    """Console logging configuration."""

    level: str = Field(
        default="info", description="Console verbosity level: error | warning | info | debug"
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        if value.lower() not in LEVEL_MAP:
            raise ValueError(f"level must be one of: {', '.join(LEVEL_MAP)}")
        return value.lower()


class LogFileNames(BaseModel):
    """File names of the exploration logs inside the output directory.

    Defaults match the names earlier runs were written with, so their logs
    stay resumable.
    """

    explored: str = "exploredPoints.txt"
    sat: str = "satPoints.txt"
    models: str = "satPointModels.txt"
    unsat: str = "unSatPoints.txt"
    timed_out: str = "timedOutPoints.txt"
    pareto: str = "paretoPoints.txt"

    model_config = ConfigDict(extra="forbid", frozen=True)


class ExplorationConfig(BaseSettings):
    """Run settings with hierarchical priority.

    Priority order (highest to lowest):
    1. Keyword arguments
    2. Environment variables (COSTEXP_* prefix)
    3. Project config (costexplorer.yaml)
    4. Built-in defaults
    """

    output_dir: Path = Field(
        default=Path("exploration"), description="Directory receiving the exploration logs"
    )
    per_query_timeout: int = Field(
        default=600, gt=0, description="Oracle time limit for a single query, in seconds"
    )
    total_timeout: int = Field(
        default=3600,
        ge=0,
        description="Global budget of accumulated oracle time, in seconds",
    )
    stop_on_timeout: bool = Field(
        default=False,
        description="Stop a one-dimensional search at the first TIMEOUT/UNKNOWN answer",
    )
    max_queries: int | None = Field(
        default=None, gt=0, description="Optional cap on the number of oracle queries"
    )
    log_files: LogFileNames = Field(default_factory=LogFileNames)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Explicit project file; excluded from dumps
    config_file: Path | None = Field(default=None, exclude=True)

    _project_dir: Path = PrivateAttr(default=None)

    model_config = SettingsConfigDict(
        env_prefix="COSTEXP_",
        env_nested_delimiter="__",
        extra="forbid",
        case_sensitive=False,
        env_file=None,  # Config files are read by YamlSettingsSource
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Keyword arguments, then COSTEXP_* variables, then costexplorer.yaml.

        Dotenv and secret files are not consulted.
        """
        config_file = init_settings().get("config_file")
        if config_file is not None:
            config_file = Path(config_file)

        return (
            init_settings,
            env_settings,
            YamlSettingsSource(settings_cls, project_file=config_file),
        )

    def model_post_init(self, __context: Any) -> None:
        """Resolve relative paths against the project directory."""
        self._project_dir = self._detect_project_dir()
        if not self.output_dir.is_absolute():
            self.output_dir = (self._project_dir / self.output_dir).resolve()

    def _detect_project_dir(self) -> Path:
        """Directory of the config file in use, or CWD when there is none."""
        if self.config_file is not None:
            return Path(self.config_file).resolve().parent

        if _PROJECT_DIR_ENV in os.environ:
            return Path(os.environ[_PROJECT_DIR_ENV]).resolve()

        config_file = _find_project_config()
        if config_file:
            return config_file.parent

        return Path.cwd().resolve()

    @property
    def project_dir(self) -> Path:
        return self._project_dir
