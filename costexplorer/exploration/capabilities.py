# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Capability contracts a solver implements to take part in exploration.

Each cost dimension is a protocol with two methods: one extracting the
dimension's value from a solved model, one asserting an upper bound on it in
the solver's current scope. A solver advertises the dimensions it supports
simply by implementing the methods; composite protocols bundle the common
combinations. All protocols are runtime checkable, so parameter classes can
verify a solver before the first query.

Example:
    class MySolver:
        def get_model(self) -> dict[str, str]: ...
        def check_sat(self, timeout_seconds: int) -> SatResult: ...
        def push_context(self) -> None: ...
        def pop_context(self, num_contexts: int) -> None: ...
        def get_latency(self, model: Mapping[str, str]) -> int: ...
        def generate_latency_constraint(self, latency: int) -> None: ...

    isinstance(MySolver(), LatencyConstraints)  # True
"""

from typing import Mapping, Protocol, runtime_checkable

from costexplorer.exploration.types import SatResult


@runtime_checkable
class SolverFunctions(Protocol):
    """Operations every oracle provides, independent of cost dimensions."""

    def get_model(self) -> dict[str, str]:
        """Assignment of the last SAT answer (valid only after SAT)."""
        ...

    def check_sat(self, timeout_seconds: int) -> SatResult:
        ...

    def push_context(self) -> None:
        ...

    def pop_context(self, num_contexts: int) -> None:
        ...


# =============================================================================
# One cost dimension each
# =============================================================================

@runtime_checkable
class LatencyConstraints(SolverFunctions, Protocol):
    def get_latency(self, model: Mapping[str, str]) -> int:
        ...

    def generate_latency_constraint(self, latency: int) -> None:
        ...


@runtime_checkable
class PeriodConstraints(SolverFunctions, Protocol):
    def get_period(self, model: Mapping[str, str]) -> int:
        ...

    def generate_period_constraint(self, period: int) -> None:
        ...


@runtime_checkable
class ProcessorConstraints(SolverFunctions, Protocol):
    def get_processors(self, model: Mapping[str, str]) -> int:
        ...

    def generate_processor_constraint(self, processors: int) -> None:
        ...


@runtime_checkable
class BufferConstraints(SolverFunctions, Protocol):
    def get_total_buffer_size(self, model: Mapping[str, str]) -> int:
        ...

    def generate_buffer_constraint(self, buffer_size: int) -> None:
        ...


@runtime_checkable
class CommunicationCostConstraints(SolverFunctions, Protocol):
    def get_communication_cost(self, model: Mapping[str, str]) -> int:
        ...

    def generate_communication_cost_constraint(self, communication_cost: int) -> None:
        ...


@runtime_checkable
class WorkloadImbalanceConstraints(SolverFunctions, Protocol):
    def get_workload_imbalance(self, model: Mapping[str, str]) -> int:
        ...

    def generate_workload_imbalance_constraint(self, imbalance: int) -> None:
        ...


@runtime_checkable
class ClusterConstraints(SolverFunctions, Protocol):
    def get_total_clusters_used(self, model: Mapping[str, str]) -> int:
        ...

    def generate_cluster_constraint(self, num_clusters: int) -> None:
        ...


@runtime_checkable
class MaxWorkloadPerClusterConstraints(SolverFunctions, Protocol):
    def get_max_workload_per_cluster(self, model: Mapping[str, str]) -> int:
        ...

    def generate_max_workload_per_cluster_constraint(self, workload: int) -> None:
        ...


# =============================================================================
# Composites
# =============================================================================

@runtime_checkable
class LatProcConstraints(LatencyConstraints, ProcessorConstraints, Protocol):
    pass


@runtime_checkable
class LatBuffConstraints(LatencyConstraints, BufferConstraints, Protocol):
    pass


@runtime_checkable
class PeriodProcConstraints(PeriodConstraints, ProcessorConstraints, Protocol):
    pass


@runtime_checkable
class WrkLdCommCostConstraints(
    WorkloadImbalanceConstraints, CommunicationCostConstraints, Protocol
):
    pass


@runtime_checkable
class LatProcBuffConstraints(
    LatencyConstraints, ProcessorConstraints, BufferConstraints, Protocol
):
    pass


@runtime_checkable
class WorkloadCommClusterConstraints(
    WorkloadImbalanceConstraints, CommunicationCostConstraints, ClusterConstraints, Protocol
):
    pass


@runtime_checkable
class MaxWrkLdCommCostClusterConstraints(
    MaxWorkloadPerClusterConstraints, CommunicationCostConstraints, ClusterConstraints, Protocol
):
    pass
