# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Binary search for the least feasible value of a single cost."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional, Union

from costexplorer.exceptions import ConfigurationError
from costexplorer.exploration.explorer import Explorer
from costexplorer.exploration.log import LogKind
from costexplorer.exploration.parameters import ExplorationParameters
from costexplorer.settings.schema import ExplorationConfig

logger = logging.getLogger(__name__)


class BinarySearchOneDim(Explorer):
    """Finds the least SAT value of a one-dimensional cost in [lower, upper].

    A SAT answer moves the upper bound below the realized cost, which may be
    smaller than the queried bound. UNSAT and inconclusive answers move the
    lower bound past it. With a monotone oracle the search needs at most
    ``ceil(log2(upper - lower + 1)) + 1`` queries.
    """

    def __init__(
        self,
        params: ExplorationParameters,
        output_dir: Union[str, Path],
        per_query_timeout: int,
        total_timeout: int,
        stop_on_timeout: bool = False,
        **kwargs,
    ) -> None:
        if params.dimensions != 1:
            raise ConfigurationError(
                f"Binary search explores exactly one dimension, got {params.dimensions}"
            )
        super().__init__(params, output_dir, per_query_timeout, total_timeout, **kwargs)

        self.stop_on_timeout = stop_on_timeout
        self._sat_points: list[int] = []
        self._unsat_points: list[int] = []
        self._timed_out_points: list[int] = []
        self._models: dict[int, dict[str, str]] = {}

    @classmethod
    def _config_options(cls, config: ExplorationConfig) -> dict:
        return {"stop_on_timeout": config.stop_on_timeout}

    @property
    def sat_points(self) -> list[int]:
        return list(self._sat_points)

    @property
    def unsat_points(self) -> list[int]:
        return list(self._unsat_points)

    @property
    def timed_out_points(self) -> list[int]:
        return list(self._timed_out_points)

    def least_sat_point(self) -> float:
        """Smallest realized SAT cost, or ``math.inf`` if there is none."""
        return min(self._sat_points) if self._sat_points else math.inf

    def least_sat_point_model(self) -> Optional[dict[str, str]]:
        if not self._sat_points:
            return None
        model = self._models.get(min(self._sat_points))
        return dict(model) if model is not None else None

    def explore(self) -> None:
        """Run the search over the current bounds of dimension 0."""
        bounds = self.params.bounds(0)
        lower, upper = bounds.lower, bounds.upper
        logger.info(self.params.describe_limits())

        while lower <= upper and not self.should_stop:
            bound = lower + (upper - lower) // 2

            with self.params.solver_context():
                result = self.smt_query([bound])

            if result.is_sat:
                realized = result.costs[0]
                self._sat_points.append(realized)
                self._models.setdefault(realized, result.model)
                upper = min(realized, bound) - 1
            elif result.status.is_inconclusive:
                self._timed_out_points.append(bound)
                lower = bound + 1
                if self.stop_on_timeout:
                    logger.warning(f"Query at {bound} returned {result.status}; stopping search")
                    break
            else:
                self._unsat_points.append(bound)
                lower = bound + 1

            logger.debug(f"Search interval now [{lower}, {upper}]")

        if self.budget_exhausted:
            logger.warning(
                f"Exploration budget of {self.total_timeout} s exhausted "
                f"after {self.query_count} queries"
            )

        self.write_pareto([[self.least_sat_point()]])
        self.log_summary(1 if self._sat_points else 0)

    def read_explored_points(self, results_dir: Optional[Union[str, Path]] = None) -> None:
        """Load the points of an earlier run from its logs.

        Later log writes append to the existing files. Bounds are not
        touched; see resume_bounds().

        Raises:
            LogParseError: If a log line is malformed
        """
        directory = Path(results_dir) if results_dir is not None else self.output_dir

        self._sat_points.extend(r.int_values()[0] for r in self.log.read_points(LogKind.SAT, directory))
        self._unsat_points.extend(
            r.int_values()[0] for r in self.log.read_points(LogKind.UNSAT, directory)
        )
        self._timed_out_points.extend(
            r.int_values()[0] for r in self.log.read_points(LogKind.TIMED_OUT, directory)
        )
        for record in self.log.read_models(directory):
            self._models.setdefault(record.point.int_values()[0], record.model)

        self.mark_resumed()
        logger.info(
            f"Resumed {len(self._sat_points)} SAT, {len(self._unsat_points)} UNSAT and "
            f"{len(self._timed_out_points)} timed-out point(s) from {directory}"
        )

    def resume_bounds(self) -> tuple[int, int]:
        """Search interval implied by the current bounds and the known points."""
        bounds = self.params.bounds(0)
        lower, upper = bounds.lower, bounds.upper
        failed = self._unsat_points + self._timed_out_points
        if failed:
            lower = max(lower, max(failed) + 1)
        if self._sat_points:
            upper = min(upper, min(self._sat_points) - 1)
        return lower, upper
