"""
Unit tests for the greedy cover heuristic and solver mode resolution.

Run with: python -m pytest Hangar_Placement/_tests/test_greedy.py -v
"""

import pytest

from Hangar_Placement.models.data_models import DroneModel
from Hangar_Placement.solvers.coverage_matrix import build_coverage_matrix
from Hangar_Placement.solvers.solver_algorithms import (
    greedy_lower_bound,
    resolve_solver_mode,
    solve_greedy,
)
from Hangar_Placement.solvers.solver_config import GreedyConfig
from Hangar_Placement._tests.conftest import make_points


class TestSolveGreedy:
    """Max-marginal-coverage selection."""

    def test_picks_widest_coverage_first(self):
        """The middle site covers all three points on its own."""
        points = make_points([0, 10, 20])
        matrix = build_coverage_matrix(points, [DroneModel("r10", 10.0)])

        selected, stats = solve_greedy(matrix)

        assert selected == [1]
        assert stats["points_covered"] == 3
        assert stats["complete"] is True

    def test_ties_go_to_enumeration_order(self):
        """Two isolated points: site 0 before site 1."""
        points = make_points([0, 100])
        matrix = build_coverage_matrix(points, [DroneModel("r1", 1.0)])

        selected, stats = solve_greedy(matrix)

        assert selected == [0, 1]
        assert stats["iterations"] == 2

    def test_model_ties_go_to_first_model(self):
        points = make_points([0, 3])
        models = [DroneModel("a", 5.0), DroneModel("b", 6.0)]
        matrix = build_coverage_matrix(points, models)

        selected, _ = solve_greedy(matrix)

        assert selected == [0]

    def test_greedy_trap_is_suboptimal(self, greedy_trap):
        points, models = greedy_trap
        matrix = build_coverage_matrix(points, models)

        selected, stats = solve_greedy(matrix)

        # p3 first, then p1 for p0, then p5 for p6
        assert selected == [1, 0, 2]
        assert stats["hangar_count"] == 3

    def test_uncoverable_points_ignored(self):
        """Greedy stops once every coverable point is covered."""
        points = make_points([0, 50], eligible=[True, False])
        matrix = build_coverage_matrix(points, [DroneModel("r1", 1.0)])

        selected, stats = solve_greedy(matrix)

        assert selected == [0]
        assert stats["points_coverable"] == 1
        assert stats["complete"] is True

    def test_no_candidates(self):
        points = make_points([0, 1], eligible=[False, False])
        matrix = build_coverage_matrix(points, [DroneModel("r1", 1.0)])

        selected, stats = solve_greedy(matrix)

        assert selected == []
        assert stats["iterations"] == 0

    def test_max_iterations_cap(self):
        points = make_points([0, 100, 200])
        matrix = build_coverage_matrix(points, [DroneModel("r1", 1.0)])

        selected, stats = solve_greedy(matrix, GreedyConfig(max_iterations=2))

        assert len(selected) == 2
        assert stats["complete"] is False


class TestGreedyLowerBound:
    """ceil(coverable / widest candidate)."""

    def test_bound_value(self, greedy_trap):
        points, models = greedy_trap
        matrix = build_coverage_matrix(points, models)
        # 7 coverable points, widest candidate covers 5
        assert greedy_lower_bound(matrix) == 2

    def test_bound_without_candidates(self):
        points = make_points([0], eligible=[False])
        matrix = build_coverage_matrix(points, [DroneModel("r1", 1.0)])
        assert greedy_lower_bound(matrix) == 0


class TestResolveSolverMode:
    """solver_mode string → use_exact flag."""

    @pytest.mark.parametrize(
        "mode,expected",
        [("exact", True), ("greedy", False)],
    )
    def test_known_modes(self, mode, expected):
        use_exact, reason = resolve_solver_mode(mode)
        assert use_exact is expected
        assert reason

    @pytest.mark.parametrize("mode", ["auto", "Greedy", ""])
    def test_unknown_mode_raises(self, mode):
        with pytest.raises(ValueError, match="Unknown solver_mode"):
            resolve_solver_mode(mode)
