# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Distance-based approximation of the Pareto frontier.

The cost space is normalized to the unit cube. A knee tree tracks the
boundary of the known-infeasible region; each step queries the midpoint
between a knee and the known SAT point farthest from it, which halves the
largest unexplored cube. SAT answers shrink the cubes around the knees,
UNSAT answers split knees into finer ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from costexplorer.exceptions import ConfigurationError
from costexplorer.exploration.explorer import Explorer
from costexplorer.exploration.frontier import hypervolume
from costexplorer.exploration.knee import KneeTree
from costexplorer.exploration.log import LogKind
from costexplorer.exploration.parameters import ExplorationParameters
from costexplorer.exploration.point import Point
from costexplorer.exploration.pointsets import SatPointSet, UnsatPointSet
from costexplorer.exploration.scale import ScalePoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A query proposal of select_point().

    Attributes:
        sat_point: Known SAT point (normalized)
        knee: Generator of the leaf (normalized)
        distance: One-sided distance from knee to sat_point
        midpoint: Normalized midpoint of the two
        query_point: Native integer costs the midpoint maps to
    """

    sat_point: Point
    knee: Point
    distance: float
    midpoint: Point
    query_point: tuple[int, ...]


class DistanceBasedExploration(Explorer):
    """Pareto exploration of two or more cost dimensions.

    Example:
        params = LatProcParams(solver, lower_bounds=[100, 1], upper_bounds=[900, 8])
        with DistanceBasedExploration(params, "out/", 60, 3600) as explorer:
            explorer.pareto_exploration()
            frontier = explorer.pareto_points()
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
                f"Pareto exploration needs at least 2 dimensions, got {params.dimensions}"
            )
        super().__init__(params, output_dir, per_query_timeout, total_timeout, **kwargs)

        self.scaler: Optional[ScalePoint] = None
        self.tree: Optional[KneeTree] = None
        self.sat_points = SatPointSet()
        self.unsat_points = UnsatPointSet()
        self.timed_out_points = UnsatPointSet()

        self._top: Optional[Point] = None
        self._queried: set[tuple[int, ...]] = set()
        # normalized SAT point -> realized native costs, model
        self._native: dict[Point, tuple[int, ...]] = {}
        self._models: dict[tuple[int, ...], dict[str, str]] = {}

    def _initialize(self) -> None:
        if self.tree is not None:
            return
        self.scaler = ScalePoint(self.params.lower_bounds, self.params.upper_bounds)
        self._top = Point.filled(self.dimensions, 1.0)
        self.sat_points.add(self._top)
        self.tree = KneeTree(self.dimensions)
        logger.info(self.params.describe_limits())

    # Queries

    def select_point(self) -> Optional[Candidate]:
        """Pick the (SAT point, knee) pair at maximal distance.

        Leaves are visited in dimension order and the first of equally
        distant pairs wins. A pair whose midpoint was queried before, or is
        known UNSAT, is skipped in favor of the leaf's next-farthest SAT
        point.

        Returns:
            The best candidate, or None if no leaf has one left
        """
        self._initialize()
        best: Optional[Candidate] = None
        targets = self._targets()

        for leaf_id in self.tree.leaves():
            knee = self.tree.node(leaf_id).generator
            ranked = sorted(
                ((knee.distance(p), index, p) for index, p in enumerate(targets)),
                key=lambda item: (-item[0], item[1]),
            )
            for distance, _, sat_point in ranked:
                if distance <= 0.0:
                    break
                if best is not None and distance <= best.distance:
                    break
                candidate = self._candidate(sat_point, knee, distance)
                if candidate is not None:
                    best = candidate
                    break

        return best

    def _targets(self) -> list[Point]:
        """Known SAT points to pair with knees.

        The upper corner of the cube stays a target after a real SAT point
        evicts it from the SAT set.
        """
        points = self.sat_points.points
        if self._top in self.sat_points:
            return points
        return [self._top] + points

    def _candidate(self, sat_point: Point, knee: Point, distance: float) -> Optional[Candidate]:
        midpoint = sat_point.midpoint(knee)
        query_point = self.scaler.unscale(midpoint).integer_coordinates()
        if query_point in self._queried or midpoint in self.unsat_points:
            return None
        if self.scaler.scale(Point(query_point)) in self.unsat_points:
            return None
        return Candidate(sat_point, knee, distance, midpoint, query_point)

    def pareto_exploration(self) -> None:
        """Query until the budget is spent or nothing is left to query."""
        self._initialize()

        while not self.should_stop:
            candidate = self.select_point()
            if candidate is None:
                logger.info("No unexplored candidate left")
                break

            logger.debug(
                f"Selected SAT point {candidate.sat_point} and knee {candidate.knee} "
                f"(distance {candidate.distance:.4f})"
            )
            self._queried.add(candidate.query_point)

            with self.params.solver_context():
                result = self.smt_query(candidate.query_point)

            if result.is_sat:
                self._record_sat(result.costs, result.model)
            else:
                self._record_failure(Point(candidate.query_point), inconclusive=result.status.is_inconclusive)

        if self.budget_exhausted:
            logger.warning(
                f"Exploration budget of {self.total_timeout} s exhausted "
                f"after {self.query_count} queries"
            )

        frontier = self.pareto_points()
        self.write_pareto(frontier)
        self.log_summary(len(frontier))
        if frontier:
            logger.info(f"Normalized hypervolume of the frontier: {self.frontier_hypervolume():.4f}")

    # Propagation

    def _record_sat(self, costs: tuple[int, ...], model: dict[str, str]) -> None:
        s = self.scaler.scale(Point(costs))
        self.tree.propagate_sat(s)
        self.sat_points.add(s)
        if s in self.sat_points:
            self._native.setdefault(s, tuple(costs))
        self._models.setdefault(tuple(costs), dict(model))

    def _record_failure(self, query_point: Point, inconclusive: bool = False) -> None:
        s = self.scaler.scale(query_point)
        self.tree.propagate_unsat(s, self.sat_points.points)
        self.unsat_points.add(s)
        if inconclusive:
            self.timed_out_points.add(s)
        if self.tree.is_empty:
            logger.debug("Knee tree is empty")

    def prop_sat(self, s: Point) -> None:
        """Apply a normalized SAT point to the knee tree."""
        self._initialize()
        self.tree.propagate_sat(s)

    def prop_unsat(self, s: Point) -> None:
        """Apply a normalized UNSAT point to the knee tree."""
        self._initialize()
        self.tree.propagate_unsat(s, self.sat_points.points)

    # Results

    def pareto_points(self) -> list[tuple[int, ...]]:
        """Native costs of the non-dominated SAT points found so far."""
        return [self._native[p] for p in self.sat_points if p in self._native]

    def pareto_models(self) -> list[Optional[dict[str, str]]]:
        """Model of every point of pareto_points(), in the same order."""
        return [
            dict(self._models[costs]) if costs in self._models else None
            for costs in self.pareto_points()
        ]

    def frontier_hypervolume(self) -> float:
        """Hypervolume dominated by the frontier in the unit cube."""
        points = [list(p) for p in self.sat_points if p in self._native]
        return hypervolume(points, [1.0] * self.dimensions)

    def read_explored_points(self, results_dir: Optional[Union[str, Path]] = None) -> None:
        """Replay the logs of an earlier run through the knee tree.

        Later log writes append to the existing files.

        Raises:
            LogParseError: If a log line is malformed
        """
        self._initialize()
        directory = Path(results_dir) if results_dir is not None else self.output_dir

        models = {r.point.int_values(): r.model for r in self.log.read_models(directory)}
        sat = self.log.read_points(LogKind.SAT, directory)
        for record in sat:
            costs = record.int_values()
            self._record_sat(costs, models.get(costs, {}))

        unsat = self.log.read_points(LogKind.UNSAT, directory)
        timed_out = self.log.read_points(LogKind.TIMED_OUT, directory)
        for record in unsat:
            self._record_failure(Point(record.int_values()))
        for record in timed_out:
            self._record_failure(Point(record.int_values()), inconclusive=True)

        for record in self.log.read_points(LogKind.EXPLORED, directory):
            self._queried.add(record.int_values())

        self.mark_resumed()
        logger.info(
            f"Resumed {len(sat)} SAT, {len(unsat)} UNSAT and {len(timed_out)} "
            f"timed-out point(s) from {directory}"
        )
