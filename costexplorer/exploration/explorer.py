# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Shared query engine of all exploration algorithms.

The Explorer owns the oracle-facing side of an exploration: asserting the
cost bounds of one query, timing it, writing the logs and classifying the
answer. Algorithms subclass it and only decide *where* to query next.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional, Sequence, Union

from costexplorer._internal.logging import setup_logging
from costexplorer.exceptions import ConfigurationError, OracleResultError
from costexplorer.exploration.log import ExplorationLog
from costexplorer.exploration.parameters import ExplorationParameters
from costexplorer.exploration.types import QueryResult, SatResult
from costexplorer.settings.schema import ExplorationConfig, LogFileNames

logger = logging.getLogger(__name__)


class Explorer:
    """Base class of the exploration engines.

    Use as a context manager (or call close()) so the log files are released
    on every exit path:

        with BinarySearchOneDim(params, "out/", 60, 600) as search:
            search.explore()

    Attributes:
        params: Problem side of the exploration
        output_dir: Directory receiving the log files
        per_query_timeout: Oracle time limit per query, in seconds
        total_timeout: Budget of accumulated oracle time, in seconds
        max_queries: Optional cap on the number of queries
        total_exploration_time: Oracle time spent so far, in seconds
        query_count: Number of queries issued so far
    """

    def __init__(
        self,
        params: ExplorationParameters,
        output_dir: Union[str, Path],
        per_query_timeout: int,
        total_timeout: int,
        max_queries: Optional[int] = None,
        log_file_names: Optional[LogFileNames] = None,
    ) -> None:
        if output_dir is None or not str(output_dir).strip():
            raise ConfigurationError("An output directory is required")
        output_dir = Path(output_dir)
        if output_dir.exists() and not output_dir.is_dir():
            raise ConfigurationError(f"Output path {output_dir} exists and is not a directory")
        if per_query_timeout <= 0:
            raise ConfigurationError(f"per_query_timeout must be > 0, got {per_query_timeout}")
        if total_timeout < 0:
            raise ConfigurationError(f"total_timeout must be >= 0, got {total_timeout}")
        if max_queries is not None and max_queries < 1:
            raise ConfigurationError(f"max_queries must be >= 1, got {max_queries}")

        params.validate()

        self.params = params
        self.output_dir = output_dir
        self.per_query_timeout = int(per_query_timeout)
        self.total_timeout = total_timeout
        self.max_queries = max_queries
        self.log = ExplorationLog(output_dir, params.constraint_names, log_file_names)

        self.total_exploration_time = 0.0
        self.query_count = 0
        self._resumed = False

    @classmethod
    def from_config(cls, params: ExplorationParameters, config: ExplorationConfig, **kwargs):
        """Build an engine from an ExplorationConfig; kwargs override it.

        Also applies the configured console log level.
        """
        setup_logging(config.logging.level)
        options = dict(
            output_dir=config.output_dir,
            per_query_timeout=config.per_query_timeout,
            total_timeout=config.total_timeout,
            max_queries=config.max_queries,
            log_file_names=config.log_files,
        )
        options.update(cls._config_options(config))
        options.update(kwargs)
        return cls(params, **options)

    @classmethod
    def _config_options(cls, config: ExplorationConfig) -> dict:
        """Engine-specific constructor arguments taken from the config."""
        return {}

    # Resources

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the log files. Safe to call more than once."""
        self.log.close()

    def _ensure_log_open(self) -> None:
        if not self.log.is_open:
            self.log.open(append=self._resumed)

    def mark_resumed(self) -> None:
        """Append to existing logs instead of truncating them."""
        self._resumed = True

    @property
    def resumed(self) -> bool:
        return self._resumed

    # Budget

    @property
    def dimensions(self) -> int:
        return self.params.dimensions

    @property
    def budget_exhausted(self) -> bool:
        return self.total_exploration_time > self.total_timeout

    @property
    def query_limit_reached(self) -> bool:
        return self.max_queries is not None and self.query_count >= self.max_queries

    @property
    def should_stop(self) -> bool:
        return self.budget_exhausted or self.query_limit_reached

    # Queries

    def smt_query(self, costs: Sequence[int]) -> QueryResult:
        """Ask the oracle whether a schedule within ``costs`` exists.

        The caller brackets the call in params.solver_context(); the bounds
        asserted here live in that context.

        Raises:
            OracleResultError: On an unrecognized tag or a malformed cost vector
        """
        if len(costs) != self.dimensions:
            raise ValueError(f"Expected {self.dimensions} costs, got {len(costs)}")
        constraints = tuple(int(c) for c in costs)

        self._ensure_log_open()

        for dimension, value in enumerate(constraints):
            self.params.set_constraint(dimension, value)

        start = time.monotonic()
        status = self.params.solver_query(self.per_query_timeout)
        elapsed = time.monotonic() - start

        self.total_exploration_time += elapsed
        self.query_count += 1

        if not isinstance(status, SatResult):
            raise OracleResultError(f"Oracle returned {status!r} instead of a SatResult")

        self.log.record_explored(constraints, status, elapsed)
        logger.info(
            f"Query {self.query_count}: {self.log.grammar.format_values(constraints)}"
            f"-> {status} ({elapsed:.3f} s, total {self.total_exploration_time:.3f} s)"
        )

        if status == SatResult.SAT:
            costs_found = tuple(self.params.get_costs_from_model())
            if len(costs_found) != self.dimensions:
                raise OracleResultError(
                    f"Oracle model has {len(costs_found)} costs, expected {self.dimensions}"
                )
            model = self.params.get_model_from_solver()
            self.log.record_sat(costs_found, model, elapsed)
            return QueryResult(status, constraints, costs_found, dict(model), elapsed)

        if status == SatResult.UNSAT:
            self.log.record_unsat(constraints, status, elapsed)
        elif status.is_inconclusive:
            self.log.record_timed_out(constraints, status, elapsed)
        else:
            raise OracleResultError(f"Unexpected oracle result {status}")

        return QueryResult(status, constraints, elapsed=elapsed)

    def write_pareto(self, points: Sequence[Sequence[float]]) -> None:
        """Write the final point(s) to the Pareto log."""
        self._ensure_log_open()
        self.log.record_pareto(points)

    def log_summary(self, frontier_size: int) -> None:
        logger.info(
            f"Finished exploration: {self.query_count} queries in "
            f"{self.total_exploration_time:.3f} s, {frontier_size} frontier point(s)"
        )
