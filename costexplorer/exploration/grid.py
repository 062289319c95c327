# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Grid-based Pareto exploration.

The cost space is covered by a grid whose step halves on every pass,
starting at half the range of each dimension. The outer dimensions walk the
grid (coarse points first); the last dimension is binary searched for each
combination of outer values. A point in the forward cone of a known SAT
point, or the backward cone of a known UNSAT/timed-out point, is decided
without asking the oracle.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from costexplorer.exceptions import ConfigurationError
from costexplorer.exploration.explorer import Explorer
from costexplorer.exploration.frontier import hypervolume, pareto_filter
from costexplorer.exploration.log import LogKind
from costexplorer.exploration.parameters import ExplorationParameters
from costexplorer.exploration.point import Point
from costexplorer.exploration.pointsets import SatPointSet, UnsatPointSet
from costexplorer.exploration.scale import ScalePoint
from costexplorer.exploration.types import SatResult

logger = logging.getLogger(__name__)


def grid_indices(steps: int) -> list[int]:
    """Indices ``0..steps`` ordered coarse to fine.

    ``grid_indices(4) == [0, 2, 4, 1, 3]``
    """
    order = []
    seen = set()
    stride = max(steps // 2, 1)
    while stride >= 1:
        for k in range(0, steps + 1, stride):
            if k not in seen:
                seen.add(k)
                order.append(k)
        stride //= 2
    return order


class GridBasedExploration(Explorer):
    """Pareto exploration on successively finer grids.

    Stops when the grid step of every dimension is within its exploration
    granularity, when the lower-bounds corner is known SAT, or when the
    budget runs out.
    """

    def __init__(
        self,
        params: ExplorationParameters,
        output_dir: Union[str, Path],
        per_query_timeout: int,
        total_timeout: int,
        **kwargs,
    ) -> None:
        if params.dimensions < 2:
            raise ConfigurationError(
                f"Grid exploration needs at least 2 dimensions, got {params.dimensions}"
            )
        super().__init__(params, output_dir, per_query_timeout, total_timeout, **kwargs)

        self.epsilon = 0.5
        self._lower: list[int] = []
        self._upper: list[int] = []
        self._sat_points: list[tuple[int, ...]] = []
        self._sat_models: list[dict[str, str]] = []
        self._known_sat = SatPointSet()
        self._known_unsat = UnsatPointSet()

    @property
    def sat_points(self) -> list[tuple[int, ...]]:
        return list(self._sat_points)

    def explore(self) -> None:
        self._lower = self.params.lower_bounds
        self._upper = self.params.upper_bounds
        logger.info(self.params.describe_limits())

        self.epsilon = 0.5
        while True:
            coords = [float(v) for v in self._lower]
            if self._sweep(0, coords):
                break
            if self._granularity_reached():
                logger.info(f"Exploration granularity reached at epsilon {self.epsilon}")
                break
            self.epsilon /= 2
            logger.debug(f"Refining grid to epsilon {self.epsilon}")

        if self.budget_exhausted:
            logger.warning(
                f"Exploration budget of {self.total_timeout} s exhausted "
                f"after {self.query_count} queries"
            )

        frontier = self.pareto_points()
        self.write_pareto(frontier)
        self.log_summary(len(frontier))
        if frontier:
            scaler = ScalePoint(self._lower, self._upper)
            scaled = [list(scaler.scale(Point(p))) for p in frontier]
            volume = hypervolume(scaled, [1.0] * self.dimensions)
            logger.info(f"Normalized hypervolume of the frontier: {volume:.4f}")

    # Grid walk

    def _value(self, dimension: int, index: int) -> float:
        span = self._upper[dimension] - self._lower[dimension]
        return self._lower[dimension] + index * self.epsilon * span

    def _steps(self) -> int:
        return int(round(1 / self.epsilon))

    def _sweep(self, dimension: int, coords: list[float]) -> bool:
        """Walk the grid from ``dimension`` on; True once the run must stop."""
        last = self.dimensions - 1
        if dimension < last:
            for index in grid_indices(self._steps()):
                coords[dimension] = self._value(dimension, index)
                if self._sweep(dimension + 1, coords):
                    return True
            return False
        return self._search_last_dimension(coords)

    def _search_last_dimension(self, coords: list[float]) -> bool:
        last = self.dimensions - 1

        # Nothing to find if the bottom is SAT or the top UNSAT
        coords[last] = self._lower[last]
        if self._known(self._grid_point(coords)) == SatResult.SAT:
            return False
        coords[last] = self._upper[last]
        if self._known(self._grid_point(coords)) == SatResult.UNSAT:
            return False

        lower, upper = 0, self._steps()
        while lower <= upper:
            middle = lower + (upper - lower) // 2
            coords[last] = self._value(last, middle)
            candidate = self._grid_point(coords)

            result = self._known(candidate)
            if result is None:
                if self.should_stop:
                    return True
                result = self._query(candidate)

            if result == SatResult.SAT:
                upper = middle - 1
            else:
                lower = middle + 1

            if self.should_stop or self._contains_lowest_point():
                return True
        return False

    @staticmethod
    def _grid_point(coords: list[float]) -> Point:
        return Point(tuple(int(c) for c in coords))

    def _known(self, point: Point) -> Optional[SatResult]:
        """SAT or UNSAT if a known point decides ``point``, else None."""
        if self._known_sat.covers(point):
            return SatResult.SAT
        if self._known_unsat.covers(point):
            return SatResult.UNSAT
        return None

    def _query(self, candidate: Point) -> SatResult:
        with self.params.solver_context():
            result = self.smt_query(candidate.integer_coordinates())

        if result.is_sat:
            self._add_sat(result.costs, result.model)
        else:
            # Timed-out points are treated as UNSAT for the rest of the run
            self._known_unsat.add(candidate)
        return result.status

    def _add_sat(self, costs: tuple[int, ...], model: dict[str, str]) -> None:
        self._sat_points.append(tuple(costs))
        self._sat_models.append(dict(model))
        self._known_sat.add(Point(costs))

    def _contains_lowest_point(self) -> bool:
        return self._known_sat.covers(Point(self._lower))

    def _granularity_reached(self) -> bool:
        for dimension in range(self.dimensions):
            span = self._upper[dimension] - self._lower[dimension]
            first = int(self._lower[dimension] + span * self.epsilon)
            second = int(self._lower[dimension] + span * self.epsilon * 2)
            if self.params.get_exploration_granularity(dimension) < second - first:
                return False
        return True

    # Results

    def pareto_points(self) -> list[tuple[int, ...]]:
        """Non-dominated SAT points found so far."""
        return [tuple(int(v) for v in p) for p in pareto_filter(self._sat_points)]

    def pareto_models(self) -> list[dict[str, str]]:
        """Model of every point of pareto_points(), in the same order."""
        models = []
        for point in self.pareto_points():
            index = self._sat_points.index(point)
            models.append(dict(self._sat_models[index]))
        return models

    def read_explored_points(self, results_dir: Optional[Union[str, Path]] = None) -> None:
        """Load the SAT, UNSAT and timed-out points of an earlier run.

        Later log writes append to the existing files.

        Raises:
            LogParseError: If a log line is malformed
        """
        directory = Path(results_dir) if results_dir is not None else self.output_dir

        models = {r.point.int_values(): r.model for r in self.log.read_models(directory)}
        for record in self.log.read_points(LogKind.SAT, directory):
            costs = record.int_values()
            self._add_sat(costs, models.get(costs, {}))
        for kind in (LogKind.UNSAT, LogKind.TIMED_OUT):
            for record in self.log.read_points(kind, directory):
                self._known_unsat.add(Point(record.int_values()))

        self.mark_resumed()
        logger.info(
            f"Resumed {len(self._sat_points)} SAT and {len(self._known_unsat)} "
            f"UNSAT/timed-out point(s) from {directory}"
        )
