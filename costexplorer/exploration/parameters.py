# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Interface between exploration algorithms and a concrete solver encoding.

An ExplorationParameters object knows how many cost dimensions are explored,
their names and ranges, and how to turn "bound dimension i by v" into solver
constraints. The algorithms never talk to the solver directly.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from costexplorer.exceptions import ConfigurationError, DimensionError
from costexplorer.exploration.types import Bounds, SatResult

logger = logging.getLogger(__name__)


class ExplorationParameters(ABC):
    """Abstract base for the per-problem side of an exploration.

    Subclasses implement the six solver hooks; bounds, names and granularity
    are handled here.

    Attributes:
        dimensions: Number of cost dimensions explored
    """

    def __init__(
        self,
        dimensions: int,
        constraint_names: Sequence[str],
        lower_bounds: Optional[Sequence[int]] = None,
        upper_bounds: Optional[Sequence[int]] = None,
    ) -> None:
        if dimensions < 1:
            raise ConfigurationError(f"At least one dimension is required, got {dimensions}")
        if len(constraint_names) != dimensions:
            raise ConfigurationError(
                f"Expected {dimensions} constraint names, got {len(constraint_names)}"
            )

        self.dimensions = dimensions
        self._constraint_names = list(constraint_names)
        self._lower_bounds = [0] * dimensions
        self._upper_bounds = [0] * dimensions
        self._granularity = [1] * dimensions

        self.set_bounds(lower_bounds, upper_bounds)

    # ------------------------------------------------------------------
    # Solver hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def set_constraint(self, dimension: int, value: int) -> None:
        """Bound ``dimension`` by ``value`` for the next query.

        The bound lives in the current solver context and disappears with
        the next pop_solver_context().
        """

    @abstractmethod
    def get_costs_from_model(self) -> list[int]:
        """Realized cost of every dimension in the last SAT model."""

    @abstractmethod
    def get_model_from_solver(self) -> dict[str, str]:
        """Variable assignment of the last SAT answer."""

    @abstractmethod
    def solver_query(self, timeout_seconds: int) -> SatResult:
        """Ask the oracle whether the asserted bounds are feasible."""

    @abstractmethod
    def push_solver_context(self) -> None:
        """Save the solver context before cost constraints are added."""

    @abstractmethod
    def pop_solver_context(self, num_contexts: int = 1) -> None:
        """Drop the ``num_contexts`` most recent solver contexts."""

    @contextmanager
    def solver_context(self) -> Iterator[None]:
        """Bracket constraint assertions in one push/pop pair.

        The pop runs on every exit path, so a rejected hypothesis never
        leaks into later queries.
        """
        self.push_solver_context()
        try:
            yield
        finally:
            self.pop_solver_context(1)

    # ------------------------------------------------------------------
    # Bounds and metadata
    # ------------------------------------------------------------------

    def check_dimension(self, dimension: int) -> None:
        if not 0 <= dimension < self.dimensions:
            raise DimensionError(dimension, self.dimensions)

    def set_bounds(
        self,
        lower_bounds: Optional[Sequence[int]] = None,
        upper_bounds: Optional[Sequence[int]] = None,
    ) -> None:
        """Set lower and/or upper bounds for every dimension.

        Passing None leaves that side unchanged.
        """
        for name, values in (("lower", lower_bounds), ("upper", upper_bounds)):
            if values is not None and len(values) != self.dimensions:
                raise ConfigurationError(
                    f"Expected {self.dimensions} {name} bounds, got {len(values)}"
                )

        if lower_bounds is not None:
            self._lower_bounds = [int(v) for v in lower_bounds]
        if upper_bounds is not None:
            self._upper_bounds = [int(v) for v in upper_bounds]

    def set_lower_bound(self, dimension: int, bound: int) -> None:
        self.check_dimension(dimension)
        self._lower_bounds[dimension] = int(bound)

    def set_upper_bound(self, dimension: int, bound: int) -> None:
        self.check_dimension(dimension)
        self._upper_bounds[dimension] = int(bound)

    def set_exploration_granularity(self, dimension: int, granularity: int) -> None:
        """Set the grid step size below which grid exploration stops refining."""
        self.check_dimension(dimension)
        if granularity < 1:
            raise ConfigurationError(f"Granularity must be >= 1, got {granularity}")
        self._granularity[dimension] = int(granularity)

    def get_exploration_granularity(self, dimension: int) -> int:
        self.check_dimension(dimension)
        return self._granularity[dimension]

    @property
    def lower_bounds(self) -> list[int]:
        return list(self._lower_bounds)

    @property
    def upper_bounds(self) -> list[int]:
        return list(self._upper_bounds)

    def bounds(self, dimension: int) -> Bounds:
        """Validated range of one dimension."""
        self.check_dimension(dimension)
        return Bounds(
            self._lower_bounds[dimension],
            self._upper_bounds[dimension],
            self._granularity[dimension],
        )

    def get_constraint_name(self, dimension: int) -> str:
        """Name of a dimension, e.g. "Latency" or "Processors"."""
        self.check_dimension(dimension)
        return self._constraint_names[dimension]

    @property
    def constraint_names(self) -> list[str]:
        return list(self._constraint_names)

    def validate(self) -> None:
        """Check every dimension's bounds.

        Raises:
            ConfigurationError: On inverted bounds or granularity below 1
        """
        for dimension in range(self.dimensions):
            self.bounds(dimension)

    def describe_limits(self) -> str:
        """One-line summary of names, ranges and granularity."""
        limits = " :: ".join(
            f"{name} ({low}, {high})"
            for name, low, high in zip(self._constraint_names, self._lower_bounds, self._upper_bounds)
        )
        granularity = ", ".join(str(g) for g in self._granularity)
        return f"Exploration Limits :: {limits} | Granularity ({granularity})"
