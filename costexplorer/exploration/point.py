# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Immutable points of the cost space.

Comparison helpers follow the product order: ``p.less_than_or_equals(q)``
holds when every coordinate of ``p`` is at most the matching coordinate of
``q``. Costs are minimized, so a smaller point is a better one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, Union

Operand = Union["Point", float, int]


@dataclass(frozen=True)
class Point:
    """n-dimensional real vector.

    Attributes:
        coordinates: One value per cost dimension
    """

    coordinates: tuple[float, ...]

    def __post_init__(self) -> None:
        if not self.coordinates:
            raise ValueError("A point needs at least one coordinate")
        object.__setattr__(self, "coordinates", tuple(float(c) for c in self.coordinates))

    @classmethod
    def of(cls, values: Iterable[float]) -> Point:
        return cls(tuple(values))

    @classmethod
    def filled(cls, dimensions: int, value: float = 0.0) -> Point:
        """Point with every coordinate set to ``value``."""
        return cls((value,) * dimensions)

    @property
    def dim(self) -> int:
        return len(self.coordinates)

    def __len__(self) -> int:
        return len(self.coordinates)

    def __iter__(self) -> Iterator[float]:
        return iter(self.coordinates)

    def __getitem__(self, index: int) -> float:
        return self.coordinates[index]

    def __str__(self) -> str:
        return "(" + ", ".join(str(c) for c in self.coordinates) + ")"

    # Arithmetic

    def _zip(self, other: Operand) -> Iterator[tuple[float, float]]:
        if isinstance(other, Point):
            self._check_dim(other)
            return zip(self.coordinates, other.coordinates)
        return ((c, float(other)) for c in self.coordinates)

    def _check_dim(self, other: Point) -> None:
        if other.dim != self.dim:
            raise ValueError(f"Dimension mismatch: {self.dim} vs {other.dim}")

    def plus(self, other: Operand) -> Point:
        return Point(tuple(a + b for a, b in self._zip(other)))

    def minus(self, other: Operand) -> Point:
        return Point(tuple(a - b for a, b in self._zip(other)))

    def multiply(self, other: Operand) -> Point:
        return Point(tuple(a * b for a, b in self._zip(other)))

    def divide(self, value: float) -> Point:
        return Point(tuple(c / value for c in self.coordinates))

    def midpoint(self, other: Point) -> Point:
        return self.plus(other).divide(2)

    def with_coordinate(self, index: int, value: float) -> Point:
        """Copy of this point with one coordinate replaced."""
        if not 0 <= index < self.dim:
            raise IndexError(f"Coordinate {index} out of range for a {self.dim}-D point")
        coords = list(self.coordinates)
        coords[index] = value
        return Point(tuple(coords))

    def integer_coordinates(self) -> tuple[int, ...]:
        """Coordinates truncated toward zero, as the oracle expects them."""
        return tuple(int(c) for c in self.coordinates)

    # Lattice operations

    def meet(self, other: Point) -> Point:
        """Elementwise minimum."""
        return Point(tuple(min(a, b) for a, b in self._zip(other)))

    def join(self, other: Point) -> Point:
        """Elementwise maximum."""
        return Point(tuple(max(a, b) for a, b in self._zip(other)))

    def distance(self, other: Point) -> float:
        """One-sided Chebyshev distance from this point to ``other``.

        Only coordinates where ``other`` exceeds this point count; the result
        is the largest such excess, or 0.0 when there is none.
        """
        result = 0.0
        for a, b in self._zip(other):
            excess = b - a
            if excess > 0 and excess > result:
                result = excess
        return result

    # Order predicates

    def less_than(self, other: Point) -> bool:
        """Strictly smaller in every coordinate."""
        return all(a < b for a, b in self._zip(other))

    def less_than_or_equals(self, other: Point) -> bool:
        return all(a <= b for a, b in self._zip(other))

    def greater_than(self, other: Point) -> bool:
        """Strictly larger in every coordinate."""
        return all(a > b for a, b in self._zip(other))

    def greater_than_or_equals(self, other: Point) -> bool:
        return all(a >= b for a, b in self._zip(other))

    def dominates(self, other: Point) -> bool:
        """At most ``other`` everywhere and strictly smaller somewhere."""
        return self.less_than_or_equals(other) and self.coordinates != other.coordinates


def meet_all(points: Sequence[Point]) -> Point:
    """n-way meet of a non-empty sequence of points."""
    if not points:
        raise ValueError("meet_all() needs at least one point")
    result = points[0]
    for point in points[1:]:
        result = result.meet(point)
    return result


def join_all(points: Sequence[Point]) -> Point:
    """n-way join of a non-empty sequence of points."""
    if not points:
        raise ValueError("join_all() needs at least one point")
    result = points[0]
    for point in points[1:]:
        result = result.join(point)
    return result
