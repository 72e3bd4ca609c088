"""
Unit tests for parallel subtree search.

Uses the threading backend so tests stay in-process.

Run with: python -m pytest Hangar_Placement/_tests/test_parallel.py -v
"""

import pytest

from Hangar_Placement.models.data_models import (
    DroneModel,
    InspectionPoint,
    SearchBudget,
)
from Hangar_Placement.parallel.subtree_orchestrator import (
    get_effective_worker_count,
    should_use_parallel,
    solve_branch_and_bound_parallel,
    split_node_budget,
)
from Hangar_Placement.parallel.subtree_worker import worker_search_subtree
from Hangar_Placement.solvers.branch_and_bound import (
    BranchAndBoundSearch,
    solve_branch_and_bound,
)
from Hangar_Placement.solvers.coverage_matrix import build_coverage_matrix
from Hangar_Placement.solvers.solver_algorithms import solve_greedy
from Hangar_Placement.solvers.solver_config import (
    BranchBoundConfig,
    ParallelConfig,
    SolverConfig,
)
from Hangar_Placement.solvers.solver_orchestration import optimize_hangars
from Hangar_Placement._tests.conftest import random_instance


THREADED = ParallelConfig(
    enabled=True, max_workers=2, min_branches_for_parallel=2, backend="threading"
)


@pytest.fixture
def grid_instance():
    """
    3 × 3 grid, 1 km spacing, every point a site, 1 km drone.

    The corner g0 has three covering sites, so the root has three branches.
    """
    points = [
        InspectionPoint(f"g{3 * row + col}", col * 1000.0, row * 1000.0, True)
        for row in range(3)
        for col in range(3)
    ]
    models = [DroneModel("r1", 1000.0)]
    return points, models


class TestParallelDecision:
    """Eligibility and worker counts."""

    def test_disabled(self):
        use, reason = should_use_parallel(10, SearchBudget(), ParallelConfig())
        assert use is False
        assert "disabled" in reason

    def test_too_few_branches(self):
        use, _ = should_use_parallel(1, SearchBudget(), THREADED)
        assert use is False

    def test_budget_too_small(self):
        use, reason = should_use_parallel(3, SearchBudget(max_nodes=3), THREADED)
        assert use is False
        assert "too small" in reason

    def test_eligible(self):
        use, _ = should_use_parallel(3, SearchBudget(max_nodes=4), THREADED)
        assert use is True

    def test_worker_count_capped_by_branches(self):
        config = ParallelConfig(max_workers=8)
        assert get_effective_worker_count(3, config) == 3

    def test_worker_count_auto(self):
        config = ParallelConfig(max_workers=-1, optimal_workers_default=2)
        assert 1 <= get_effective_worker_count(10, config) <= 2


class TestNodeBudgetSplit:
    """Root node first, then an even share per subtree."""

    def test_unlimited(self):
        assert split_node_budget(None, 3) == [None, None, None]

    def test_even_split_with_remainder(self):
        assert split_node_budget(11, 3) == [4, 3, 3]
        assert sum(split_node_budget(11, 3)) == 10


class TestParallelSearch:
    """Parallel result equals the sequential optimum."""

    def test_grid_root_branches(self, grid_instance):
        points, models = grid_instance
        matrix = build_coverage_matrix(points, models)
        assert len(BranchAndBoundSearch(matrix).root_branches()) == 3

    def test_matches_sequential(self, grid_instance):
        points, models = grid_instance
        matrix = build_coverage_matrix(points, models)
        greedy, _ = solve_greedy(matrix)

        sequential = solve_branch_and_bound(matrix, greedy)
        parallel = solve_branch_and_bound_parallel(
            matrix, greedy, parallel_config=THREADED
        )

        assert parallel.completed is True
        assert len(parallel.solution) == len(sequential.solution)
        assert parallel.covered_count == matrix.n_coverable

    @pytest.mark.parametrize("seed", range(4))
    def test_random_instances(self, seed):
        points, models = random_instance(seed, n_points=12)
        matrix = build_coverage_matrix(points, models)
        greedy, _ = solve_greedy(matrix)
        config = ParallelConfig(
            enabled=True, max_workers=2, min_branches_for_parallel=1, backend="threading"
        )

        sequential = solve_branch_and_bound(matrix, greedy)
        parallel = solve_branch_and_bound_parallel(matrix, greedy, parallel_config=config)

        assert parallel.completed is True
        assert len(parallel.solution) == len(sequential.solution)

    def test_falls_back_to_sequential(self, grid_instance):
        points, models = grid_instance
        matrix = build_coverage_matrix(points, models)

        outcome = solve_branch_and_bound_parallel(
            matrix, [], parallel_config=ParallelConfig(enabled=False)
        )

        assert outcome.completed is True

    def test_node_budget_split_marks_incomplete(self, grid_instance):
        points, models = grid_instance
        matrix = build_coverage_matrix(points, models)
        greedy, _ = solve_greedy(matrix)

        outcome = solve_branch_and_bound_parallel(
            matrix, greedy, SearchBudget(max_nodes=4), parallel_config=THREADED
        )

        assert outcome.nodes_explored <= 4
        assert len(outcome.solution) <= len(matrix.collapse_shared_sites(greedy))

    def test_optimize_hangars_parallel(self, grid_instance):
        points, models = grid_instance
        config = SolverConfig(parallel=THREADED)

        result = optimize_hangars(points, models, config)

        assert result.exact is True
        assert result.uncovered_ids == []


class TestSubtreeWorker:
    """Thin worker wrapper."""

    def test_worker_result_dict(self, grid_instance):
        points, models = grid_instance
        matrix = build_coverage_matrix(points, models)
        greedy, _ = solve_greedy(matrix)
        branch = BranchAndBoundSearch(matrix).root_branches()[0]

        result = worker_search_subtree(
            branch_index=0,
            branch=branch,
            matrix=matrix,
            seed_solution=greedy,
            max_nodes=None,
            deadline_epoch=None,
            bnb_config=BranchBoundConfig(),
        )

        assert result["success"] is True
        assert result["completed"] is True
        assert result["error"] is None
        assert result["nodes_explored"] >= 1

    def test_worker_error_captured(self, grid_instance):
        points, models = grid_instance
        matrix = build_coverage_matrix(points, models)

        result = worker_search_subtree(
            branch_index=0,
            branch=matrix.n_candidates + 5,
            matrix=matrix,
            seed_solution=[],
            max_nodes=None,
            deadline_epoch=None,
            bnb_config=BranchBoundConfig(),
        )

        assert result["success"] is False
        assert "IndexError" in result["error"]
