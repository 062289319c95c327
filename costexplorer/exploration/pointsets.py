# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Known-feasible and known-infeasible points of an exploration."""

from typing import Iterator

from costexplorer.exploration.point import Point


class SatPointSet:
    """Mutually non-dominated SAT points.

    Adding a point evicts every member it is at most; a point already covered
    by a member is rejected. The set is therefore always an antichain.
    """

    def __init__(self) -> None:
        self._points: list[Point] = []

    def add(self, point: Point) -> bool:
        """Insert ``point`` unless a member already is at most it.

        Returns:
            True if the point was inserted
        """
        if self.covers(point):
            return False
        self._points = [p for p in self._points if not point.less_than_or_equals(p)]
        self._points.append(point)
        return True

    def covers(self, point: Point) -> bool:
        """True if ``point`` lies in the forward cone of a member."""
        return any(p.less_than_or_equals(point) for p in self._points)

    @property
    def points(self) -> list[Point]:
        return list(self._points)

    def __contains__(self, point: Point) -> bool:
        return point in self._points

    def __iter__(self) -> Iterator[Point]:
        return iter(list(self._points))

    def __len__(self) -> int:
        return len(self._points)


class UnsatPointSet:
    """Append-only record of points proven (or assumed) infeasible."""

    def __init__(self) -> None:
        self._points: list[Point] = []
        self._members: set[Point] = set()

    def add(self, point: Point) -> None:
        if point not in self._members:
            self._members.add(point)
            self._points.append(point)

    def covers(self, point: Point) -> bool:
        """True if ``point`` lies in the backward cone of a member."""
        return any(point.less_than_or_equals(p) for p in self._points)

    @property
    def points(self) -> list[Point]:
        return list(self._points)

    def __contains__(self, point: Point) -> bool:
        return point in self._members

    def __iter__(self) -> Iterator[Point]:
        return iter(list(self._points))

    def __len__(self) -> int:
        return len(self._points)
