# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""costexplorer configuration module.

Provides type-safe configuration management with Pydantic Settings.
"""

from .loader import get_config, load_config, reset_config
from .schema import ExplorationConfig, LogFileNames, LoggingConfig

__all__ = [
    "ExplorationConfig",
    "LogFileNames",
    "LoggingConfig",
    "load_config",
    "get_config",
    "reset_config",
]
