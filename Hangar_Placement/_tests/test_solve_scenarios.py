"""
End-to-end tests for solve / optimize_hangars.

Tests:
1. Reference scenarios (single site, two far points, unreachable point,
   zero node budget)
2. Result invariants: partition, soundness, idempotence
3. Input validation
4. Solver modes and the bundled sample problem

Run with: python -m pytest Hangar_Placement/_tests/test_solve_scenarios.py -v
"""

import math

import pytest

from Hangar_Placement import (
    DroneModel,
    HangarPlacementInputError,
    InspectionPoint,
    SearchBudget,
    SolveMethod,
    solve,
)
from Hangar_Placement.solvers.coverage_matrix import build_coverage_matrix
from Hangar_Placement.solvers.solver_algorithms import solve_greedy
from Hangar_Placement.solvers.solver_config import (
    create_fast_config,
    create_default_config,
)
from Hangar_Placement.solvers.solver_orchestration import optimize_hangars
from Hangar_Placement._tests.conftest import make_points, random_instance


def _distance(hangar, point) -> float:
    return math.hypot(hangar.x - point.x, hangar.y - point.y)


def assert_partition(result, points):
    """covered + uncovered is exactly the input ids, in input order."""
    ids = [p.point_id for p in points]
    assert set(result.covered_ids).isdisjoint(result.uncovered_ids)
    assert sorted(result.covered_ids + result.uncovered_ids) == sorted(ids)
    assert result.covered_ids == [i for i in ids if i in set(result.covered_ids)]


def assert_sound(result, points):
    """Every covered id is within range of some selected hangar, and no other is."""
    for p in points:
        reachable = any(_distance(h, p) <= h.range_m for h in result.selected)
        assert reachable == (p.point_id in result.covered_ids), p.point_id


# ============================================================================
# REFERENCE SCENARIOS
# ============================================================================


class TestReferenceScenarios:
    """Small hand-checked instances."""

    def test_single_site_covers_single_point(self):
        points = [InspectionPoint("A", 0.0, 0.0, True)]
        result = solve(points, [DroneModel("r1", 1.0)])

        assert len(result.selected) == 1
        assert result.selected[0].hangar_location_id == "A"
        assert result.covered_ids == ["A"]
        assert result.uncovered_ids == []
        assert result.exact is True

    def test_two_far_points_need_two_hangars(self):
        points = make_points([0, 100])
        result = solve(points, [DroneModel("r40", 40.0)])

        assert [h.hangar_location_id for h in result.selected] == ["p0", "p1"]
        assert result.uncovered_ids == []
        assert result.exact is True

    def test_unreachable_point_stays_uncovered(self):
        points = make_points([0, 5, 1000], eligible=[True, False, False])
        models = [DroneModel("r10", 10.0)]

        for _ in range(3):
            result = solve(points, models)
            assert result.uncovered_ids == ["p2"]
            assert result.covered_ids == ["p0", "p1"]
            assert result.exact is True
            assert result.stats["uncoverable_ids"] == ["p2"]

    def test_zero_node_budget_returns_greedy(self, greedy_trap):
        points, models = greedy_trap
        matrix = build_coverage_matrix(points, models)
        greedy, _ = solve_greedy(matrix)
        greedy_sites = [
            points[int(matrix.site_indices[matrix.candidate(k)[0]])].point_id
            for k in greedy
        ]

        result = solve(points, models, SearchBudget(max_nodes=0))

        assert result.exact is False
        assert result.method == SolveMethod.GREEDY
        assert result.nodes_explored == 0
        assert [h.hangar_location_id for h in result.selected] == greedy_sites

    def test_exact_search_beats_greedy(self, greedy_trap):
        points, models = greedy_trap
        result = solve(points, models)

        assert result.exact is True
        assert result.method == SolveMethod.BRANCH_AND_BOUND
        assert [h.hangar_location_id for h in result.selected] == ["p1", "p5"]
        assert result.uncovered_ids == []

    def test_no_eligible_sites(self):
        points = make_points([0, 1, 2], eligible=[False, False, False])
        result = solve(points, [DroneModel("r10", 10.0)])

        assert result.selected == []
        assert result.covered_ids == []
        assert result.uncovered_ids == ["p0", "p1", "p2"]
        assert result.exact is True
        assert result.method == SolveMethod.TRIVIAL

    def test_widest_model_chosen_when_needed(self):
        """Only the 10 km model reaches both points from the single site."""
        points = make_points([0, 8000], eligible=[True, False])
        models = [DroneModel("r5", 5000.0), DroneModel("r10", 10000.0)]
        result = solve(points, models)

        assert len(result.selected) == 1
        assert result.selected[0].drone_model_name == "r10"
        assert result.selected[0].range_m == 10000.0


# ============================================================================
# RESULT INVARIANTS
# ============================================================================


class TestResultInvariants:
    """Partition, soundness and repeatability."""

    @pytest.mark.parametrize("seed", range(6))
    def test_partition_and_soundness(self, seed):
        points, models = random_instance(seed, n_points=12)
        result = solve(points, models)

        assert_partition(result, points)
        assert_sound(result, points)

    @pytest.mark.parametrize("seed", range(3))
    def test_partition_under_budget(self, seed):
        points, models = random_instance(seed, n_points=12)
        result = solve(points, models, SearchBudget(max_nodes=2))

        assert_partition(result, points)
        assert_sound(result, points)

    def test_idempotent(self):
        points, models = random_instance(7, n_points=12)

        first = solve(points, models)
        second = solve(points, models)

        assert first.as_dict() == second.as_dict()

    def test_one_hangar_per_site(self):
        points, models = random_instance(2, n_points=12)
        result = solve(points, models)

        sites = [h.hangar_location_id for h in result.selected]
        assert len(sites) == len(set(sites))

    def test_result_counters_and_rate(self, greedy_trap):
        points, models = greedy_trap
        result = solve(points, models)

        assert result.total_points == 7
        assert result.covered_points == 7
        assert result.coverage_rate == 1.0
        assert result.hangar_count == 2
        assert result.nodes_explored > 0
        assert "timing" in result.stats


# ============================================================================
# INPUT VALIDATION
# ============================================================================


class TestInputValidation:
    """Invalid input fails before any computation."""

    def test_empty_points(self):
        with pytest.raises(HangarPlacementInputError):
            solve([], [DroneModel("a", 1.0)])

    def test_empty_models(self):
        with pytest.raises(HangarPlacementInputError):
            solve(make_points([0]), [])

    @pytest.mark.parametrize("bad_range", [0.0, -1.0, float("nan"), float("inf")])
    def test_bad_range(self, bad_range):
        with pytest.raises(HangarPlacementInputError):
            solve(make_points([0]), [DroneModel("a", bad_range)])

    def test_non_finite_coordinate(self):
        points = [InspectionPoint("a", float("nan"), 0.0)]
        with pytest.raises(HangarPlacementInputError):
            solve(points, [DroneModel("a", 1.0)])

    def test_duplicate_point_id(self):
        points = [InspectionPoint("a", 0.0, 0.0), InspectionPoint("a", 1.0, 0.0)]
        with pytest.raises(HangarPlacementInputError):
            solve(points, [DroneModel("m", 1.0)])

    def test_duplicate_model_name(self):
        with pytest.raises(HangarPlacementInputError):
            solve(make_points([0]), [DroneModel("m", 1.0), DroneModel("m", 2.0)])

    def test_negative_budget(self):
        with pytest.raises(HangarPlacementInputError):
            SearchBudget(max_nodes=-1)
        with pytest.raises(HangarPlacementInputError):
            SearchBudget(max_time_ms=-5)

    def test_input_error_is_value_error(self):
        with pytest.raises(ValueError):
            solve([], [])


# ============================================================================
# SOLVER MODES
# ============================================================================


class TestSolverModes:
    """Greedy-only mode and the bundled sample."""

    def test_greedy_mode_not_exact_on_trap(self, greedy_trap):
        points, models = greedy_trap
        result = optimize_hangars(points, models, create_fast_config())

        assert result.method == SolveMethod.GREEDY
        assert result.exact is False
        assert result.hangar_count == 3
        assert result.nodes_explored == 0

    def test_greedy_mode_exact_when_bound_met(self):
        """A single hangar covering everything is trivially minimum."""
        points = make_points([0, 10, 20])
        result = optimize_hangars(
            points, [DroneModel("r10", 10.0)], create_fast_config()
        )

        assert result.exact is True
        assert result.hangar_count == 1

    def test_budget_argument_overrides_config(self, greedy_trap):
        points, models = greedy_trap
        config = create_default_config(max_nodes=1000)

        result = solve(points, models, SearchBudget(max_nodes=0), config)

        assert result.exact is False

    def test_sample_problem(self, sample_problem):
        points, models = sample_problem
        result = solve(points, models)

        assert [h.hangar_location_id for h in result.selected] == ["p1"]
        assert result.selected[0].drone_model_name == "DJI-M300-8KM"
        assert result.covered_ids == ["p1", "p2"]
        assert result.uncovered_ids == ["p3", "p4", "p5", "p6", "p7"]
        assert result.exact is True
