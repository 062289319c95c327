# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Unit tests for Point and ScalePoint."""

import pytest

from costexplorer.exploration.point import Point, join_all, meet_all
from costexplorer.exploration.scale import ScalePoint


class TestPointBasics:

    def test_coordinates_are_floats(self):
        p = Point.of([1, 2, 3])
        assert p.coordinates == (1.0, 2.0, 3.0)
        assert p.dim == 3
        assert list(p) == [1.0, 2.0, 3.0]

    def test_empty_point_rejected(self):
        with pytest.raises(ValueError):
            Point(())

    def test_points_are_hashable_values(self):
        assert Point.of([1, 2]) == Point.of([1.0, 2.0])
        assert len({Point.of([1, 2]), Point.of([1, 2])}) == 1

    def test_str(self):
        assert str(Point.of([1, 2.5])) == "(1.0, 2.5)"

    def test_filled(self):
        assert Point.filled(3, 1.0) == Point.of([1, 1, 1])

    def test_dimension_mismatch(self):
        with pytest.raises(ValueError):
            Point.of([1, 2]).meet(Point.of([1, 2, 3]))


class TestPointArithmetic:

    def test_plus_minus_scalar_and_point(self):
        p = Point.of([1, 2])
        assert p.plus(0.5) == Point.of([1.5, 2.5])
        assert p.plus(Point.of([1, 1])) == Point.of([2, 3])
        assert p.minus(Point.of([1, 1])) == Point.of([0, 1])

    def test_midpoint(self):
        assert Point.of([0, 0]).midpoint(Point.of([1, 0.5])) == Point.of([0.5, 0.25])

    def test_with_coordinate(self):
        assert Point.of([1, 2]).with_coordinate(1, 7) == Point.of([1, 7])
        with pytest.raises(IndexError):
            Point.of([1, 2]).with_coordinate(2, 7)

    def test_integer_coordinates_truncate(self):
        assert Point.of([2.9, 3.1]).integer_coordinates() == (2, 3)


class TestLattice:

    def test_meet_and_join(self):
        a = Point.of([1, 5])
        b = Point.of([3, 2])
        assert a.meet(b) == Point.of([1, 2])
        assert a.join(b) == Point.of([3, 5])

    def test_n_way_meet_and_join(self):
        points = [Point.of([0, 1, 1]), Point.of([1, 0, 1]), Point.of([1, 1, 0])]
        assert meet_all(points) == Point.of([0, 0, 0])
        assert join_all(points) == Point.of([1, 1, 1])

    def test_meet_all_requires_points(self):
        with pytest.raises(ValueError):
            meet_all([])

    def test_distance_is_one_sided(self):
        g = Point.of([0.2, 0.6])
        # Only coordinates where the target is larger count
        assert g.distance(Point.of([0.5, 0.1])) == pytest.approx(0.3)
        assert g.distance(Point.of([0.1, 0.1])) == 0.0
        assert g.distance(Point.of([0.3, 1.0])) == pytest.approx(0.4)


class TestOrder:

    def test_strict_and_weak_order(self):
        a = Point.of([1, 1])
        b = Point.of([2, 2])
        c = Point.of([1, 2])
        assert a.less_than(b)
        assert not a.less_than(c)
        assert a.less_than_or_equals(c)
        assert b.greater_than(a)
        assert c.greater_than_or_equals(a)

    def test_dominates(self):
        a = Point.of([1, 2])
        assert a.dominates(Point.of([1, 3]))
        assert not a.dominates(a)
        assert not a.dominates(Point.of([0, 3]))


class TestScalePoint:

    def test_scale_and_unscale(self):
        scaler = ScalePoint([10, 0], [20, 4])
        assert scaler.scale(Point.of([15, 1])) == Point.of([0.5, 0.25])
        assert scaler.unscale(Point.of([0.5, 0.25])) == Point.of([15, 1])

    def test_degenerate_dimension(self):
        scaler = ScalePoint([3, 0], [3, 10])
        assert scaler.scale(Point.of([3, 5])) == Point.of([0, 0.5])
        assert scaler.unscale(Point.of([0.7, 0.5])) == Point.of([3, 5])

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            ScalePoint([0], [1, 2])
