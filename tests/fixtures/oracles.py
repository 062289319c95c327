# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Deterministic fake solvers.

A FakeSolver keeps its cost bounds in a stack of scopes, the way an SMT
solver keeps assertions, and records every check_sat() call. Feasibility
and the realized costs are plain functions of the effective bounds.

Cost dimensions are mixed in per capability, so a fake implements exactly
the protocols of the mixins it is built from.
"""

from typing import Callable, Dict, List, Mapping, Optional, Tuple

from costexplorer.exploration.types import SatResult

Bounds = Dict[str, int]


class FakeSolver:
    """Scoped bound store plus a scripted feasibility predicate.

    Args:
        feasible: Effective bounds -> True if a schedule exists
        realize: Effective bounds -> realized cost per dimension (SAT only);
            defaults to the bounds themselves
        forced: Bound tuples (in dimension order) answered with a fixed result
    """

    dimension_names: Tuple[str, ...] = ()

    def __init__(
        self,
        feasible: Callable[[Bounds], bool],
        realize: Optional[Callable[[Bounds], Bounds]] = None,
        forced: Optional[Dict[Tuple[int, ...], SatResult]] = None,
    ):
        self.feasible = feasible
        self.realize = realize or (lambda bounds: dict(bounds))
        self.forced = forced or {}
        self.scopes: List[Bounds] = [{}]
        self.queries: List[Tuple[Tuple[int, ...], SatResult]] = []
        self.query_depths: List[int] = []
        self.max_depth = 0
        self._model: Dict[str, str] = {}

    # Scope handling

    @property
    def depth(self) -> int:
        return len(self.scopes) - 1

    def push_context(self) -> None:
        self.scopes.append({})
        self.max_depth = max(self.max_depth, self.depth)

    def pop_context(self, num_contexts: int) -> None:
        if num_contexts > self.depth:
            raise AssertionError(f"pop({num_contexts}) with only {self.depth} open context(s)")
        del self.scopes[-num_contexts:]

    def _assert(self, name: str, value: int) -> None:
        scope = self.scopes[-1]
        scope[name] = min(value, scope.get(name, value))

    def bounds(self) -> Bounds:
        """Tightest bound per dimension across all open scopes."""
        effective: Bounds = {}
        for scope in self.scopes:
            for name, value in scope.items():
                effective[name] = min(value, effective.get(name, value))
        return effective

    # Solver functions

    def check_sat(self, timeout_seconds: int) -> SatResult:
        bounds = self.bounds()
        key = tuple(bounds[name] for name in self.dimension_names)

        if key in self.forced:
            result = self.forced[key]
        elif self.feasible(bounds):
            result = SatResult.SAT
        else:
            result = SatResult.UNSAT

        if result == SatResult.SAT:
            costs = self.realize(bounds)
            self._model = {name: str(costs[name]) for name in self.dimension_names}
            self._model["schedule"] = "fake"
        else:
            self._model = {}

        self.queries.append((key, result))
        self.query_depths.append(self.depth)
        return result

    def get_model(self) -> Dict[str, str]:
        return dict(self._model)

    @property
    def queried_points(self) -> List[Tuple[int, ...]]:
        return [key for key, _ in self.queries]


class _Latency:
    def get_latency(self, model: Mapping[str, str]) -> int:
        return int(model["latency"])

    def generate_latency_constraint(self, latency: int) -> None:
        self._assert("latency", latency)


class _Processors:
    def get_processors(self, model: Mapping[str, str]) -> int:
        return int(model["processors"])

    def generate_processor_constraint(self, processors: int) -> None:
        self._assert("processors", processors)


class _Buffer:
    def get_total_buffer_size(self, model: Mapping[str, str]) -> int:
        return int(model["buffer"])

    def generate_buffer_constraint(self, buffer_size: int) -> None:
        self._assert("buffer", buffer_size)


class LatencySolver(_Latency, FakeSolver):
    dimension_names = ("latency",)


class LatProcSolver(_Latency, _Processors, FakeSolver):
    dimension_names = ("latency", "processors")


class LatProcBuffSolver(_Latency, _Processors, _Buffer, FakeSolver):
    dimension_names = ("latency", "processors", "buffer")


class ProcessorOnlySolver(_Processors, FakeSolver):
    dimension_names = ("processors",)


# Oracles

def threshold_oracle(threshold: int, **kwargs) -> LatencySolver:
    """SAT iff latency >= threshold; the schedule found has latency == threshold."""
    return LatencySolver(
        feasible=lambda b: b["latency"] >= threshold,
        realize=lambda b: {"latency": threshold},
        **kwargs,
    )


def sum_oracle(total: int = 10, **kwargs) -> LatProcSolver:
    """SAT iff latency + processors >= total.

    The schedule found lies on latency + processors == total and splits the
    slack between the two bounds.
    """

    def realize(b: Bounds) -> Bounds:
        excess = b["latency"] + b["processors"] - total
        latency = min(max(b["latency"] - excess // 2, 0), total)
        return {"latency": latency, "processors": total - latency}

    return LatProcSolver(
        feasible=lambda b: b["latency"] + b["processors"] >= total,
        realize=realize,
        **kwargs,
    )
