# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""
costexplorer: Design Space Exploration for Multiprocessor Scheduling

Searches the cost space of a scheduling problem (latency, period, processors,
buffer size, communication cost, ...) with a feasibility oracle, usually an
SMT solver, asking as few questions as possible.

Quick Start:
    >>> from costexplorer import LatProcParams, DistanceBasedExploration
    >>> params = LatProcParams(solver, lower_bounds=[100, 1], upper_bounds=[900, 8])
    >>> with DistanceBasedExploration(params, "out/", 60, 3600) as explorer:
    ...     explorer.pareto_exploration()
    >>> explorer.pareto_points()

Single dimension:
    >>> with BinarySearchOneDim(LatencyParams(solver, [100], [900]), "out/", 60, 600) as s:
    ...     s.explore()
    >>> s.least_sat_point()
"""

__version__ = "0.1.0"

from ._internal.logging import setup_logging
from .exceptions import (
    ConfigurationError,
    DimensionError,
    ExplorationError,
    KneeInvariantError,
    LogParseError,
    OracleResultError,
)
from .exploration import (
    BinarySearchOneDim,
    CommCostParams,
    DistanceBasedExploration,
    ExplorationParameters,
    Explorer,
    GridBasedExploration,
    LatBuffParams,
    LatencyParams,
    LatProcBuffParams,
    LatProcParams,
    MaxWrkLoadCommClusterParams,
    PeriodParams,
    PeriodProcParams,
    Point,
    SatResult,
    SolverParams,
    WrkldImbalCommClusterParams,
    WrkLoadCommCostParams,
)
from .settings import ExplorationConfig, get_config, load_config, reset_config

__all__ = [
    "__version__",
    "setup_logging",
    # Engines
    "Explorer",
    "BinarySearchOneDim",
    "DistanceBasedExploration",
    "GridBasedExploration",
    # Parameters
    "ExplorationParameters",
    "SolverParams",
    "LatencyParams",
    "PeriodParams",
    "CommCostParams",
    "LatProcParams",
    "LatBuffParams",
    "PeriodProcParams",
    "WrkLoadCommCostParams",
    "LatProcBuffParams",
    "WrkldImbalCommClusterParams",
    "MaxWrkLoadCommClusterParams",
    "Point",
    "SatResult",
    # Configuration
    "ExplorationConfig",
    "load_config",
    "get_config",
    "reset_config",
    # Errors
    "ExplorationError",
    "ConfigurationError",
    "DimensionError",
    "OracleResultError",
    "KneeInvariantError",
    "LogParseError",
]
