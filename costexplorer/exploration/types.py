# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from costexplorer.exceptions import ConfigurationError


class SatResult(Enum):
    """Answer of the feasibility oracle for one query.

    Attributes:
        SAT: A schedule meeting every bound exists
        UNSAT: No schedule meets the bounds
        UNKNOWN: The solver gave up without an answer
        INCONSISTENT: Solver-internal inconsistency
        TIMEOUT: The per-query time limit was hit
        OUTOFMEMORY: The solver ran out of memory
        OTHERS: Anything else the solver may report
    """

    SAT = "SAT"
    UNSAT = "UNSAT"
    UNKNOWN = "UNKNOWN"
    INCONSISTENT = "INCONSISTENT"
    TIMEOUT = "TIMEOUT"
    OUTOFMEMORY = "OUTOFMEMORY"
    OTHERS = "OTHERS"

    @property
    def is_inconclusive(self) -> bool:
        """TIMEOUT and UNKNOWN: not proven infeasible, not proven feasible."""
        return self in (SatResult.TIMEOUT, SatResult.UNKNOWN)

    def __str__(self) -> str:
        return self.value


@dataclass
class QueryResult:
    """Outcome of a single oracle query.

    Attributes:
        status: Tag returned by the oracle
        constraints: Cost bounds asserted for the query
        costs: Realized cost vector (SAT only)
        model: Variable assignment of the solution (SAT only)
        elapsed: Oracle time in seconds
    """

    status: SatResult
    constraints: tuple[int, ...]
    costs: tuple[int, ...] | None = None
    model: dict[str, str] = field(default_factory=dict)
    elapsed: float = 0.0

    @property
    def is_sat(self) -> bool:
        return self.status == SatResult.SAT


@dataclass(frozen=True)
class Bounds:
    """Exploration range of one cost dimension.

    Attributes:
        lower: Smallest cost worth asking for
        upper: Largest cost worth asking for
        granularity: Grid step below which exploration is not refined
    """

    lower: int
    upper: int
    granularity: int = 1

    def __post_init__(self) -> None:
        if self.lower > self.upper:
            raise ConfigurationError(
                f"Inverted bounds: lower {self.lower} > upper {self.upper}"
            )
        if self.granularity < 1:
            raise ConfigurationError(f"Granularity must be >= 1, got {self.granularity}")

    @property
    def span(self) -> int:
        return self.upper - self.lower
