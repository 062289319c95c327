# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Exploration parameters for solvers implementing the capability protocols.

One parameter class works with any solver that implements the capabilities of
its dimensions, so a new solver encoding needs no new parameter class. The
presets below name the cost combinations explored in practice; bounds come
from the caller (usually from an analysis of the application graph).

Example:
    params = LatProcParams(solver, lower_bounds=[120, 1], upper_bounds=[900, 16])
    with DistanceBasedExploration(params, "out/", 60, 3600) as explorer:
        explorer.pareto_exploration()
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Generic, Optional, Sequence, TypeVar

from costexplorer.exceptions import ConfigurationError, OracleResultError
from costexplorer.exploration import capabilities as caps
from costexplorer.exploration.parameters import ExplorationParameters
from costexplorer.exploration.types import SatResult

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=caps.SolverFunctions)


@dataclass(frozen=True)
class CostDimension:
    """How one cost dimension maps onto solver methods.

    Attributes:
        name: Name written to the logs, e.g. "Latency"
        capability: Protocol the solver must implement
        getter: Solver method extracting the cost from a model
        generator: Solver method asserting a bound on the cost
    """

    name: str
    capability: type
    getter: str
    generator: str


LATENCY = CostDimension(
    "Latency", caps.LatencyConstraints, "get_latency", "generate_latency_constraint"
)
PERIOD = CostDimension(
    "Period", caps.PeriodConstraints, "get_period", "generate_period_constraint"
)
PROCESSORS = CostDimension(
    "Processors", caps.ProcessorConstraints, "get_processors", "generate_processor_constraint"
)
BUFFER_SIZE = CostDimension(
    "Buffer Size", caps.BufferConstraints, "get_total_buffer_size", "generate_buffer_constraint"
)
COMMUNICATION_COST = CostDimension(
    "Communication Cost",
    caps.CommunicationCostConstraints,
    "get_communication_cost",
    "generate_communication_cost_constraint",
)
WORKLOAD_IMBALANCE = CostDimension(
    "Workload Imbalance",
    caps.WorkloadImbalanceConstraints,
    "get_workload_imbalance",
    "generate_workload_imbalance_constraint",
)
CLUSTERS = CostDimension(
    "Number of Clusters",
    caps.ClusterConstraints,
    "get_total_clusters_used",
    "generate_cluster_constraint",
)
MAX_WORKLOAD_PER_CLUSTER = CostDimension(
    "Max Workload Per Cluster",
    caps.MaxWorkloadPerClusterConstraints,
    "get_max_workload_per_cluster",
    "generate_max_workload_per_cluster_constraint",
)


class SolverParams(ExplorationParameters, Generic[S]):
    """ExplorationParameters driving a capability-based solver.

    Subclasses only declare ``cost_dimensions``; passing ``cost_dimensions``
    to the constructor builds an ad-hoc combination instead.

    Attributes:
        solver: The oracle, exclusively owned for the engine's lifetime
    """

    cost_dimensions: ClassVar[tuple[CostDimension, ...]] = ()

    def __init__(
        self,
        solver: S,
        lower_bounds: Optional[Sequence[int]] = None,
        upper_bounds: Optional[Sequence[int]] = None,
        cost_dimensions: Optional[Sequence[CostDimension]] = None,
    ) -> None:
        dims = tuple(cost_dimensions) if cost_dimensions is not None else self.cost_dimensions
        if not dims:
            raise ConfigurationError(f"{type(self).__name__} declares no cost dimensions")

        super().__init__(len(dims), [d.name for d in dims], lower_bounds, upper_bounds)
        self._dims = dims
        self.solver = solver
        self._check_capabilities()

    def _check_capabilities(self) -> None:
        if not isinstance(self.solver, caps.SolverFunctions):
            raise ConfigurationError(
                f"{type(self.solver).__name__} does not implement the basic solver functions"
            )
        missing = [d.name for d in self._dims if not isinstance(self.solver, d.capability)]
        if missing:
            raise ConfigurationError(
                f"{type(self.solver).__name__} lacks constraints for: {', '.join(missing)}"
            )

    def set_constraint(self, dimension: int, value: int) -> None:
        self.check_dimension(dimension)
        getattr(self.solver, self._dims[dimension].generator)(int(value))

    def get_costs_from_model(self) -> list[int]:
        model = self.solver.get_model()
        costs = []
        for dim in self._dims:
            value = getattr(self.solver, dim.getter)(model)
            try:
                costs.append(int(value))
            except (TypeError, ValueError) as e:
                raise OracleResultError(
                    f"Solver returned non-integer {dim.name} cost: {value!r}"
                ) from e
        return costs

    def get_model_from_solver(self) -> dict[str, str]:
        return dict(self.solver.get_model())

    def solver_query(self, timeout_seconds: int) -> SatResult:
        return self.solver.check_sat(timeout_seconds)

    def push_solver_context(self) -> None:
        self.solver.push_context()

    def pop_solver_context(self, num_contexts: int = 1) -> None:
        self.solver.pop_context(num_contexts)


# One dimension

class LatencyParams(SolverParams[caps.LatencyConstraints]):
    cost_dimensions = (LATENCY,)


class PeriodParams(SolverParams[caps.PeriodConstraints]):
    cost_dimensions = (PERIOD,)


class CommCostParams(SolverParams[caps.CommunicationCostConstraints]):
    cost_dimensions = (COMMUNICATION_COST,)


# Two dimensions

class LatProcParams(SolverParams[caps.LatProcConstraints]):
    cost_dimensions = (LATENCY, PROCESSORS)


class LatBuffParams(SolverParams[caps.LatBuffConstraints]):
    cost_dimensions = (LATENCY, BUFFER_SIZE)


class PeriodProcParams(SolverParams[caps.PeriodProcConstraints]):
    cost_dimensions = (PERIOD, PROCESSORS)


class WrkLoadCommCostParams(SolverParams[caps.WrkLdCommCostConstraints]):
    cost_dimensions = (WORKLOAD_IMBALANCE, COMMUNICATION_COST)


# Three dimensions

class LatProcBuffParams(SolverParams[caps.LatProcBuffConstraints]):
    cost_dimensions = (LATENCY, PROCESSORS, BUFFER_SIZE)


class WrkldImbalCommClusterParams(SolverParams[caps.WorkloadCommClusterConstraints]):
    cost_dimensions = (WORKLOAD_IMBALANCE, COMMUNICATION_COST, CLUSTERS)


class MaxWrkLoadCommClusterParams(SolverParams[caps.MaxWrkLdCommCostClusterConstraints]):
    cost_dimensions = (MAX_WORKLOAD_PER_CLUSTER, COMMUNICATION_COST, CLUSTERS)
