# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Linear normalization between native cost bounds and the unit cube."""

from typing import Sequence

from costexplorer.exploration.point import Point


class ScalePoint:
    """Maps points between ``[lower, upper]`` per dimension and ``[0, 1]^n``.

    A degenerate dimension (``upper == lower``) scales to 0 and unscales to
    its single admissible value.
    """

    def __init__(self, lower_bounds: Sequence[int], upper_bounds: Sequence[int]):
        if len(lower_bounds) != len(upper_bounds):
            raise ValueError("Lower and upper bounds must have the same length")
        self.lower_bounds = tuple(lower_bounds)
        self.upper_bounds = tuple(upper_bounds)

    def _span(self, i: int) -> float:
        return float(self.upper_bounds[i] - self.lower_bounds[i])

    def scale(self, p: Point) -> Point:
        coords = []
        for i, value in enumerate(p):
            span = self._span(i)
            coords.append((value - self.lower_bounds[i]) / span if span else 0.0)
        return Point(tuple(coords))

    def unscale(self, p: Point) -> Point:
        return Point(tuple(
            value * self._span(i) + self.lower_bounds[i] for i, value in enumerate(p)
        ))
