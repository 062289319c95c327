# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Unit tests for DistanceBasedExploration."""

import pytest

from costexplorer.exceptions import ConfigurationError
from costexplorer.exploration.distance import DistanceBasedExploration
from costexplorer.exploration.log import LogKind
from costexplorer.exploration.params import LatencyParams, LatProcParams
from costexplorer.exploration.point import Point
from costexplorer.exploration.types import SatResult
from tests.fixtures.oracles import sum_oracle, threshold_oracle


def make_explorer(solver, output_dir, upper=20, cls=DistanceBasedExploration, **kwargs):
    params = LatProcParams(solver, [0, 0], [upper, upper])
    kwargs.setdefault("max_queries", 200)
    return cls(params, output_dir, 10, 3600, **kwargs)


def run(solver, output_dir, **kwargs):
    with make_explorer(solver, output_dir, **kwargs) as explorer:
        explorer.pareto_exploration()
    return explorer


def is_antichain(points):
    for i, p in enumerate(points):
        for j, q in enumerate(points):
            if i != j and all(a <= b for a, b in zip(p, q)):
                return False
    return True


class CheckedExploration(DistanceBasedExploration):
    """Checks the knee tree before every oracle call."""

    checks = 0

    def smt_query(self, costs):
        assert self.tree.check_generators()
        type(self).checks += 1
        return super().smt_query(costs)


class TestConstruction:

    def test_requires_two_dimensions(self, output_dir):
        params = LatencyParams(threshold_oracle(1), [0], [10])
        with pytest.raises(ConfigurationError):
            DistanceBasedExploration(params, output_dir, 10, 100)

    def test_first_candidate_is_cube_center(self, output_dir):
        with make_explorer(sum_oracle(), output_dir) as explorer:
            candidate = explorer.select_point()

        assert candidate.distance == 1.0
        assert candidate.knee == Point.of([0, 0])
        assert candidate.sat_point == Point.of([1, 1])
        assert candidate.query_point == (10, 10)


class TestSumScenario:

    def test_frontier_on_the_line(self, output_dir):
        solver = sum_oracle(10)
        explorer = run(solver, output_dir)
        frontier = explorer.pareto_points()

        assert len(frontier) >= 2
        assert all(latency + processors == 10 for latency, processors in frontier)
        assert is_antichain(frontier)
        assert explorer.frontier_hypervolume() > 0.0

    def test_first_queries(self, output_dir):
        solver = sum_oracle(10)
        run(solver, output_dir, max_queries=3)
        assert solver.queried_points == [(10, 10), (2, 2), (11, 10)]

    def test_no_query_point_repeated(self, output_dir):
        solver = sum_oracle(10)
        run(solver, output_dir)
        assert len(set(solver.queried_points)) == len(solver.queried_points)

    def test_stops_when_no_candidate_left(self, output_dir):
        # A 3x3 box offers at most nine distinct query points
        solver = sum_oracle(2)
        explorer = run(solver, output_dir, upper=2, max_queries=None)
        assert explorer.query_count <= 9
        assert not explorer.should_stop
        assert explorer.select_point() is None

    def test_deterministic(self, tmp_path):
        first = sum_oracle(10)
        second = sum_oracle(10)
        run(first, tmp_path / "a")
        run(second, tmp_path / "b")
        assert first.queried_points == second.queried_points

    def test_tree_invariant_before_every_query(self, output_dir):
        CheckedExploration.checks = 0
        explorer = run(sum_oracle(10), output_dir, cls=CheckedExploration)
        assert CheckedExploration.checks == explorer.query_count
        assert explorer.tree.check_generators()

    def test_every_query_in_one_context(self, output_dir):
        solver = sum_oracle(10)
        run(solver, output_dir)
        assert set(solver.query_depths) == {1}
        assert solver.depth == 0

    def test_models_follow_frontier(self, output_dir):
        explorer = run(sum_oracle(10), output_dir)
        for (latency, processors), model in zip(explorer.pareto_points(), explorer.pareto_models()):
            assert model["latency"] == str(latency)
            assert model["processors"] == str(processors)

    def test_logs_written(self, output_dir):
        solver = sum_oracle(10)
        explorer = run(solver, output_dir)

        explored = explorer.log.read_points(LogKind.EXPLORED)
        assert [r.int_values() for r in explored] == solver.queried_points
        assert (output_dir / "paretoPoints.txt").exists()
        pareto_lines = (output_dir / "paretoPoints.txt").read_text().splitlines()
        assert len(pareto_lines) == len(explorer.pareto_points())


class TestTimeouts:

    def test_timeout_treated_as_infeasible(self, output_dir):
        solver = sum_oracle(10, forced={(2, 2): SatResult.TIMEOUT})
        explorer = run(solver, output_dir, max_queries=3)

        assert Point.of([0.1, 0.1]) in explorer.timed_out_points
        assert Point.of([0.1, 0.1]) in explorer.unsat_points
        assert solver.queried_points == [(10, 10), (2, 2), (11, 10)]
        timed_out = explorer.log.read_points(LogKind.TIMED_OUT)
        assert [r.int_values() for r in timed_out] == [(2, 2)]


class TestPropagation:

    def test_public_propagation(self, output_dir):
        with make_explorer(sum_oracle(), output_dir) as explorer:
            explorer.prop_sat(Point.of([0.25, 0.25]))
            assert explorer.tree.root.radius == 0.25

            explorer.prop_unsat(Point.of([0.1, 0.1]))
            assert len(list(explorer.tree.leaves())) == 2


class TestResume:

    def test_resume_never_regresses(self, output_dir):
        first = run(sum_oracle(10), output_dir, max_queries=3)
        before = first.pareto_points()
        assert sorted(before) == [(5, 5), (6, 4)]

        with make_explorer(sum_oracle(10), output_dir) as resumed:
            resumed.read_explored_points()
            assert sorted(resumed.pareto_points()) == sorted(before)
            assert resumed.resumed
            resumed.pareto_exploration()

        after = resumed.pareto_points()
        for old in before:
            assert any(all(a <= b for a, b in zip(new, old)) for new in after)

    def test_resume_rewrites_pareto_log(self, output_dir):
        run(sum_oracle(10), output_dir, max_queries=3)

        with make_explorer(sum_oracle(10), output_dir, max_queries=7) as resumed:
            resumed.read_explored_points()
            resumed.pareto_exploration()

        lines = (output_dir / "paretoPoints.txt").read_text().splitlines()
        assert len(lines) == len(resumed.pareto_points())

    def test_resume_skips_explored_points(self, output_dir):
        run(sum_oracle(10), output_dir, max_queries=3)

        solver = sum_oracle(10)
        with make_explorer(solver, output_dir, max_queries=5) as resumed:
            resumed.read_explored_points()
            resumed.pareto_exploration()

        assert not {(10, 10), (2, 2), (11, 10)} & set(solver.queried_points)
        explored = resumed.log.read_points(LogKind.EXPLORED)
        assert len(explored) == 3 + len(solver.queried_points)
