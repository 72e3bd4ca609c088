"""
Orchestrator for parallel branch-and-bound subtree search.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Split the exact search at the root node into one job per
first-level branch, dispatch the jobs to joblib workers and merge their
results deterministically.

Follows the parallel orchestrator patterns:
- should_use_parallel() check for environment validation
- joblib Parallel with delayed for process-based parallelism
- Result collection with error aggregation
- Inline sequential fallback when dispatch fails

MERGE RULES:
- Best result by (points covered desc, hangar count asc, branch order asc),
  with the greedy seed ahead of every branch
- nodes_explored = 1 (root) + sum over subtrees
- completed only if every subtree completed
- Node budget split evenly across subtrees (remainder to the first ones);
  the wall-clock deadline is shared

Key Functions:
- solve_branch_and_bound_parallel(): Main entry point
- should_use_parallel(): Eligibility check
- get_effective_worker_count(): Worker count from ParallelConfig

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
import os
import time
from typing import Dict, Any, List, Optional, Tuple

from Hangar_Placement.models.data_models import SearchBudget
from Hangar_Placement.solvers.branch_and_bound import (
    BranchAndBoundOutcome,
    BranchAndBoundSearch,
    solve_branch_and_bound,
)
from Hangar_Placement.solvers.coverage_matrix import CoverageMatrix
from Hangar_Placement.solvers.solver_config import BranchBoundConfig, ParallelConfig

logger = logging.getLogger("HangarPlacement.Parallel.Orchestrator")


# ═══════════════════════════════════════════════════════════════════════════
# 🔍 PARALLEL DECISION LOGIC
# ═══════════════════════════════════════════════════════════════════════════


def should_use_parallel(
    n_branches: int,
    budget: SearchBudget,
    parallel_config: ParallelConfig,
) -> Tuple[bool, str]:
    """
    Determine if the root subtrees should be searched in parallel.

    Args:
        n_branches: Root branching factor.
        budget: Search budget of the call.
        parallel_config: Parallel settings.

    Returns:
        Tuple of (should_use: bool, reason: str).
    """
    # Check master toggle
    if not parallel_config.enabled:
        return False, "Parallel disabled in config"

    # Check minimum branch threshold
    min_branches = parallel_config.min_branches_for_parallel
    if n_branches < min_branches:
        return False, f"Only {n_branches} root branches (< {min_branches} threshold)"

    # Every subtree needs at least one node after the root
    if budget.max_nodes is not None and budget.max_nodes < 1 + n_branches:
        return False, f"Node budget {budget.max_nodes} too small to split"

    # Check joblib availability
    try:
        from joblib import Parallel, delayed  # noqa: F401
    except ImportError:
        return False, "joblib not installed"

    return True, f"OK ({n_branches} root branches)"


def get_effective_worker_count(
    n_branches: int,
    parallel_config: ParallelConfig,
) -> int:
    """
    Calculate worker count based on branch count and config.

    Args:
        n_branches: Number of jobs to process.
        parallel_config: Parallel settings.

    Returns:
        Number of workers to use.
    """
    max_workers = parallel_config.max_workers

    if max_workers == -1:
        # Auto-detect based on CPU cores
        cpu_count = os.cpu_count() or 4
        max_workers = min(cpu_count, parallel_config.optimal_workers_default)

    # Don't use more workers than branches
    return max(1, min(max_workers, n_branches))


def split_node_budget(max_nodes: Optional[int], n_branches: int) -> List[Optional[int]]:
    """
    Even share of the node budget per subtree, after one node for the root.

    The first ``remainder`` subtrees get one extra node.
    """
    if max_nodes is None:
        return [None] * n_branches
    share, remainder = divmod(max_nodes - 1, n_branches)
    return [share + (1 if i < remainder else 0) for i in range(n_branches)]


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 MAIN ORCHESTRATOR FUNCTION
# ═══════════════════════════════════════════════════════════════════════════


def solve_branch_and_bound_parallel(
    matrix: CoverageMatrix,
    initial_solution: List[int],
    budget: Optional[SearchBudget] = None,
    parallel_config: Optional[ParallelConfig] = None,
    bnb_config: Optional[BranchBoundConfig] = None,
    log: Optional[logging.Logger] = None,
) -> BranchAndBoundOutcome:
    """
    Exact search with the root's subtrees spread over joblib workers.

    Falls back to the sequential search when should_use_parallel() says no.

    Args:
        matrix: Coverage matrix of the solve call
        initial_solution: Greedy incumbent (upper bound for every subtree)
        budget: Node / wall-clock budget of the whole search
        parallel_config: Parallel settings
        bnb_config: Pruning switches
        log: Optional logger for the sequential path

    Returns:
        Merged BranchAndBoundOutcome
    """
    if budget is None:
        budget = SearchBudget()
    if parallel_config is None:
        parallel_config = ParallelConfig()
    if bnb_config is None:
        bnb_config = BranchBoundConfig()

    planner = BranchAndBoundSearch(matrix, initial_solution, budget, bnb_config)
    branches = planner.root_branches()

    use_parallel, reason = should_use_parallel(len(branches), budget, parallel_config)
    if not use_parallel:
        logger.info(f"   📋 Sequential branch-and-bound: {reason}")
        return solve_branch_and_bound(
            matrix, initial_solution, budget, logger=log, config=bnb_config
        )

    seed = planner.best_solution
    n_workers = get_effective_worker_count(len(branches), parallel_config)
    node_shares = split_node_budget(budget.max_nodes, len(branches))
    deadline_epoch = (
        time.time() + budget.max_time_ms / 1000.0
        if budget.max_time_ms is not None
        else None
    )

    logger.info(
        f"🚀 Dispatching {len(branches)} subtrees to {n_workers} workers "
        f"({parallel_config.backend})..."
    )

    start = time.perf_counter()
    results_list = _dispatch_subtrees(
        matrix=matrix,
        branches=branches,
        seed=seed,
        node_shares=node_shares,
        deadline_epoch=deadline_epoch,
        bnb_config=bnb_config,
        n_workers=n_workers,
        backend=parallel_config.backend,
    )
    elapsed = time.perf_counter() - start

    outcome = _collect_results(
        results_list,
        seed=seed,
        seed_covered=planner.best_covered,
        elapsed_s=elapsed,
    )
    logger.info(
        f"   ⏱️ Parallel search {outcome.stop_reason} in {elapsed:.1f}s: "
        f"{len(outcome.solution)} hangars, {outcome.nodes_explored} nodes"
    )
    return outcome


def _dispatch_subtrees(
    matrix: CoverageMatrix,
    branches: List[int],
    seed: List[int],
    node_shares: List[Optional[int]],
    deadline_epoch: Optional[float],
    bnb_config: BranchBoundConfig,
    n_workers: int,
    backend: str,
) -> List[Dict[str, Any]]:
    """Run one worker per root branch; inline sequential fallback on dispatch failure."""
    from joblib import Parallel, delayed
    from Hangar_Placement.parallel.subtree_worker import worker_search_subtree

    jobs = [
        dict(
            branch_index=i,
            branch=branch,
            matrix=matrix,
            seed_solution=seed,
            max_nodes=node_shares[i],
            deadline_epoch=deadline_epoch,
            bnb_config=bnb_config,
        )
        for i, branch in enumerate(branches)
    ]

    try:
        return list(
            Parallel(n_jobs=n_workers, backend=backend)(
                delayed(worker_search_subtree)(**job) for job in jobs
            )
        )
    except (ImportError, RuntimeError, OSError) as e:
        logger.warning(f"⚠️ Parallel dispatch failed: {e}")
        logger.info("📋 Falling back to inline sequential processing...")
        return [worker_search_subtree(**job) for job in jobs]


def _collect_results(
    results_list: List[Dict[str, Any]],
    seed: List[int],
    seed_covered: int,
    elapsed_s: float,
) -> BranchAndBoundOutcome:
    """
    Merge subtree results into one outcome.

    Args:
        results_list: Worker result dicts, in root branch order
        seed: Collapsed greedy incumbent
        seed_covered: Coverable points the seed covers
        elapsed_s: Wall-clock time of the dispatch

    Returns:
        BranchAndBoundOutcome for the whole tree
    """
    best_solution = list(seed)
    best_key = (-seed_covered, len(seed))
    best_covered = seed_covered
    improved = False
    completed = True
    stop_reason = "completed"
    nodes_explored = 1
    nodes_pruned = 0
    newly_uncoverable: List[int] = []
    error_count = 0

    for result in sorted(results_list, key=lambda r: r["branch_index"]):
        nodes_explored += result["nodes_explored"]
        nodes_pruned += result["nodes_pruned"]
        for p in result["newly_uncoverable"]:
            if p not in newly_uncoverable:
                newly_uncoverable.append(p)

        if not result["success"]:
            error_count += 1
            completed = False
            stop_reason = "error" if stop_reason == "completed" else stop_reason
            logger.warning(f"⚠️ branch {result['branch_index']}: {result['error']}")
            continue

        if not result["completed"]:
            completed = False
            if stop_reason == "completed":
                stop_reason = result["stop_reason"]

        key = (-result["covered_count"], len(result["solution"]))
        # Strict comparison keeps the earliest branch on ties
        if result["improved"] and key < best_key:
            best_key = key
            best_solution = list(result["solution"])
            best_covered = result["covered_count"]
            improved = True

    if error_count:
        logger.warning(f"📦 {error_count} subtree workers failed")

    return BranchAndBoundOutcome(
        solution=best_solution,
        covered_count=best_covered,
        nodes_explored=nodes_explored,
        nodes_pruned=nodes_pruned,
        completed=completed,
        improved=improved,
        stop_reason=stop_reason,
        elapsed_s=elapsed_s,
        newly_uncoverable=newly_uncoverable,
    )


# ═══════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════

__all__ = [
    "solve_branch_and_bound_parallel",
    "should_use_parallel",
    "get_effective_worker_count",
    "split_node_budget",
]
