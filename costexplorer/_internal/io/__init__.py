# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""File I/O helpers used by the settings layer."""

from .yaml import expand_env_vars, load_yaml

__all__ = ["expand_env_vars", "load_yaml"]
