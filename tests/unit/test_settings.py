# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Tests for run settings: sources, precedence and path resolution."""

from pathlib import Path

import pytest
import yaml

from costexplorer._internal.io.yaml import expand_env_vars, load_yaml
from costexplorer.exceptions import ConfigurationError
from costexplorer.settings import (
    ExplorationConfig,
    LogFileNames,
    LoggingConfig,
    get_config,
    load_config,
    reset_config,
)


def write_project(project: Path, text: str) -> Path:
    config_file = project / "costexplorer.yaml"
    config_file.write_text(text)
    return config_file


class TestDefaults:

    def test_builtin_defaults(self, isolated_config):
        config = load_config()

        assert config.per_query_timeout == 600
        assert config.total_timeout == 3600
        assert config.stop_on_timeout is False
        assert config.max_queries is None
        assert config.logging.level == "info"
        assert config.output_dir == (isolated_config.resolve() / "exploration")

    def test_default_log_file_names(self):
        names = LogFileNames()
        assert names.explored == "exploredPoints.txt"
        assert names.sat == "satPoints.txt"
        assert names.models == "satPointModels.txt"
        assert names.unsat == "unSatPoints.txt"
        assert names.timed_out == "timedOutPoints.txt"
        assert names.pareto == "paretoPoints.txt"

    @pytest.mark.parametrize("level", ["error", "warning", "INFO", "debug"])
    def test_valid_log_levels(self, level):
        assert LoggingConfig(level=level).level == level.lower()


class TestPrecedence:

    def test_yaml_over_defaults(self, isolated_config):
        write_project(isolated_config, "total_timeout: 120\nlogging:\n  level: debug\n")
        config = load_config()
        assert config.total_timeout == 120
        assert config.logging.level == "debug"

    def test_env_over_yaml(self, isolated_config, monkeypatch):
        write_project(isolated_config, "total_timeout: 120\nlogging:\n  level: debug\n")
        monkeypatch.setenv("COSTEXP_TOTAL_TIMEOUT", "90")
        monkeypatch.setenv("COSTEXP_LOGGING__LEVEL", "error")

        config = load_config()
        assert config.total_timeout == 90
        assert config.logging.level == "error"

    def test_kwargs_over_env(self, isolated_config, monkeypatch):
        monkeypatch.setenv("COSTEXP_TOTAL_TIMEOUT", "90")
        config = load_config(total_timeout=30, max_queries=5)
        assert config.total_timeout == 30
        assert config.max_queries == 5

    def test_nested_yaml_merges_with_defaults(self, isolated_config):
        write_project(isolated_config, "log_files:\n  pareto: front.txt\n")
        config = load_config()
        assert config.log_files.pareto == "front.txt"
        assert config.log_files.sat == "satPoints.txt"


class TestPaths:

    def test_yaml_paths_relative_to_project(self, isolated_config, monkeypatch):
        write_project(isolated_config, "output_dir: runs\n")
        nested = isolated_config / "nested"
        nested.mkdir()
        monkeypatch.chdir(nested)

        config = load_config()
        assert config.project_dir == isolated_config.resolve()
        assert config.output_dir == isolated_config.resolve() / "runs"

    def test_override_paths_relative_to_cwd(self, isolated_config, monkeypatch):
        write_project(isolated_config, "output_dir: runs\n")
        nested = isolated_config / "nested"
        nested.mkdir()
        monkeypatch.chdir(nested)

        config = load_config(output_dir="here")
        assert config.output_dir == nested.resolve() / "here"

    def test_explicit_project_file(self, isolated_config, tmp_path):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        config_file = write_project(elsewhere, "output_dir: runs\nper_query_timeout: 5\n")

        config = load_config(project_file=config_file)
        assert config.per_query_timeout == 5
        assert config.output_dir == elsewhere.resolve() / "runs"

    def test_env_vars_expanded_in_yaml(self, isolated_config, tmp_path, monkeypatch):
        monkeypatch.setenv("RUN_ROOT", str(tmp_path / "scratch"))
        write_project(isolated_config, "output_dir: ${RUN_ROOT}/runs\n")
        config = load_config()
        assert config.output_dir == tmp_path / "scratch" / "runs"


class TestInvalidValues:

    @pytest.mark.parametrize(
        "overrides",
        [
            {"per_query_timeout": 0},
            {"total_timeout": -1},
            {"max_queries": 0},
            {"logging": {"level": "loud"}},
            {"unknown_option": 1},
        ],
    )
    def test_rejected(self, isolated_config, overrides):
        with pytest.raises(ConfigurationError):
            load_config(**overrides)

    def test_unknown_yaml_key(self, isolated_config):
        write_project(isolated_config, "bogus: 1\n")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_invalid_yaml_syntax(self, isolated_config):
        write_project(isolated_config, "output_dir: [unclosed\n")
        with pytest.raises(yaml.YAMLError, match="Invalid YAML"):
            load_config()


class TestCaching:

    def test_get_config_cached_until_reset(self, isolated_config):
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first
        assert isinstance(get_config(), ExplorationConfig)


class TestYamlHelpers:

    def test_load_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml(tmp_path / "missing.yaml")

    def test_load_yaml_rejects_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(yaml.YAMLError):
            load_yaml(path)

    def test_load_yaml_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml(path) == {}

    def test_expand_env_vars(self, monkeypatch):
        monkeypatch.setenv("COSTEXP_TEST_VAR", "value")
        data = {"a": "${COSTEXP_TEST_VAR}/x", "b": ["$COSTEXP_TEST_VAR"], "c": 3}
        assert expand_env_vars(data) == {"a": "value/x", "b": ["value"], "c": 3}

    def test_undefined_vars_left_alone(self):
        assert expand_env_vars("${COSTEXP_SURELY_UNDEFINED}") == "${COSTEXP_SURELY_UNDEFINED}"
