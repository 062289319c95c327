# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Exploration engines and the types they share.

- BinarySearchOneDim: least feasible value of one cost
- DistanceBasedExploration: Pareto frontier via the knee tree
- GridBasedExploration: Pareto frontier on refining grids
"""

from .binary_search import BinarySearchOneDim
from .distance import DistanceBasedExploration
from .explorer import Explorer
from .frontier import hypervolume, pareto_filter
from .grid import GridBasedExploration
from .knee import KneeNode, KneeTree
from .log import ExplorationLog, LogKind
from .logformat import LogGrammar, ModelRecord, PointRecord
from .parameters import ExplorationParameters
from .params import (
    CommCostParams,
    CostDimension,
    LatBuffParams,
    LatencyParams,
    LatProcBuffParams,
    LatProcParams,
    MaxWrkLoadCommClusterParams,
    PeriodParams,
    PeriodProcParams,
    SolverParams,
    WrkldImbalCommClusterParams,
    WrkLoadCommCostParams,
)
from .point import Point, join_all, meet_all
from .pointsets import SatPointSet, UnsatPointSet
from .scale import ScalePoint
from .types import Bounds, QueryResult, SatResult

__all__ = [
    # Engines
    "Explorer",
    "BinarySearchOneDim",
    "DistanceBasedExploration",
    "GridBasedExploration",
    # Parameters
    "ExplorationParameters",
    "SolverParams",
    "CostDimension",
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
    # Geometry
    "Point",
    "ScalePoint",
    "meet_all",
    "join_all",
    "KneeNode",
    "KneeTree",
    "SatPointSet",
    "UnsatPointSet",
    "pareto_filter",
    "hypervolume",
    # Types and logs
    "Bounds",
    "QueryResult",
    "SatResult",
    "ExplorationLog",
    "LogKind",
    "LogGrammar",
    "PointRecord",
    "ModelRecord",
]
