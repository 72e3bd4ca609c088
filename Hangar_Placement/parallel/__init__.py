"""
Hangar Placement Parallel Processing Module

Provides parallel search of the branch-and-bound tree's first-level subtrees.
- Thin workers calling the existing BranchAndBoundSearch
- Falls back to the sequential search below the branching threshold

Module Structure:
- subtree_orchestrator.py: Eligibility, dispatch and deterministic merge
- subtree_worker.py: Thin worker for a single root branch
"""

from Hangar_Placement.parallel.subtree_orchestrator import (
    solve_branch_and_bound_parallel,
    should_use_parallel,
    get_effective_worker_count,
    split_node_budget,
)
from Hangar_Placement.parallel.subtree_worker import worker_search_subtree

__all__ = [
    "solve_branch_and_bound_parallel",
    "should_use_parallel",
    "get_effective_worker_count",
    "split_node_budget",
    "worker_search_subtree",
]
