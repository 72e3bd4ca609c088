"""
Worker function for searching one first-level subtree.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Run the branch-and-bound search below a single root branch
(one candidate chosen for the root's hardest point).
THIN WRAPPER pattern - calls BranchAndBoundSearch from
solvers/branch_and_bound.py with a one-candidate prefix.

Follows the parallel worker patterns:
- Accept only picklable parameters (numpy-backed matrix, ints, dataclasses)
- Return dict with success/error status
- No business logic duplication
- Silent logging (no progress output to avoid interleaving)

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
import time
from typing import Dict, Any, List, Optional

from Hangar_Placement.models.data_models import SearchBudget
from Hangar_Placement.solvers.branch_and_bound import BranchAndBoundSearch
from Hangar_Placement.solvers.coverage_matrix import CoverageMatrix
from Hangar_Placement.solvers.solver_config import BranchBoundConfig


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 WORKER LOGGING SETUP
# ═══════════════════════════════════════════════════════════════════════════


def _setup_worker_logging(branch_index: int) -> logging.Logger:
    """
    Named logger for one subtree worker.

    No handlers are attached; records only surface when the parent process
    configured the "HangarPlacement" hierarchy (threading backend).
    """
    logger = logging.getLogger(f"HangarPlacement.Worker.branch{branch_index}")
    logger.setLevel(logging.INFO)
    return logger


# ═══════════════════════════════════════════════════════════════════════════
# 📊 WORKER RESULT HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _create_empty_result(branch_index: int, branch: int) -> Dict[str, Any]:
    """Initial result structure with default values."""
    return {
        "branch_index": branch_index,
        "branch": branch,
        "success": False,
        "solution": [],
        "covered_count": 0,
        "nodes_explored": 0,
        "nodes_pruned": 0,
        "completed": False,
        "improved": False,
        "stop_reason": "error",
        "newly_uncoverable": [],
        "duration_seconds": 0,
        "error": None,
    }


def _remaining_time_ms(deadline_epoch: Optional[float]) -> Optional[int]:
    """Convert a shared wall-clock deadline to this worker's budget."""
    if deadline_epoch is None:
        return None
    return max(0, int((deadline_epoch - time.time()) * 1000))


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 WORKER ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════


def worker_search_subtree(
    branch_index: int,
    branch: int,
    matrix: CoverageMatrix,
    seed_solution: List[int],
    max_nodes: Optional[int],
    deadline_epoch: Optional[float],
    bnb_config: BranchBoundConfig,
) -> Dict[str, Any]:
    """
    Search the subtree rooted at ``[branch]``.

    Args:
        branch_index: Position of the branch in root search order
        branch: Candidate index chosen at the root
        matrix: Read-only coverage matrix
        seed_solution: Greedy incumbent (upper bound)
        max_nodes: This worker's share of the node budget (None = unlimited)
        deadline_epoch: Shared time.time() deadline (None = unlimited)
        bnb_config: Pruning switches

    Returns:
        Dict with success, solution, covered_count, counters, completed,
        improved, stop_reason, duration_seconds, error
    """
    start_time = time.time()
    logger = _setup_worker_logging(branch_index)
    result = _create_empty_result(branch_index, branch)

    try:
        budget = SearchBudget(
            max_nodes=max_nodes,
            max_time_ms=_remaining_time_ms(deadline_epoch),
        )
        search = BranchAndBoundSearch(
            matrix,
            initial_solution=seed_solution,
            budget=budget,
            config=bnb_config,
        )
        outcome = search.run(prefix=[branch])

        result.update(
            {
                "success": True,
                "solution": outcome.solution,
                "covered_count": outcome.covered_count,
                "nodes_explored": outcome.nodes_explored,
                "nodes_pruned": outcome.nodes_pruned,
                "completed": outcome.completed,
                "improved": outcome.improved,
                "stop_reason": outcome.stop_reason,
                "newly_uncoverable": outcome.newly_uncoverable,
            }
        )
        result["duration_seconds"] = time.time() - start_time
        logger.info(
            "✅ branch %d (candidate %d): %s, %d nodes, %.2fs",
            branch_index,
            branch,
            outcome.stop_reason,
            outcome.nodes_explored,
            result["duration_seconds"],
        )
        return result

    except Exception as e:
        result["error"] = f"{type(e).__name__}: {str(e)}"
        result["duration_seconds"] = time.time() - start_time
        logger.error("❌ branch %d: %s", branch_index, result["error"])
        return result


__all__ = [
    "worker_search_subtree",
]
