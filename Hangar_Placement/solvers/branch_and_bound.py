#!/usr/bin/env python3
"""
Hangar Placement Branch-and-Bound Module

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Exact minimum set cover over the (site, model) candidates,
seeded with the greedy answer as upper bound. Explores the search tree
depth-first, branching on the hardest uncovered point.

Key Functions:
- solve_branch_and_bound: Run the search on a coverage matrix
- BranchAndBoundSearch: Search state (counters, memo, incumbent, budget)
- BranchAndBoundOutcome: Result record returned to the orchestrator

SEARCH RULES:
1. Node: covered-point bitset + chosen candidates (path)
2. Goal: every coverable point covered
3. Branch: hardest uncovered point (fewest covering candidates, lowest
   index on ties); its candidates in descending marginal coverage, stable
   on (site, model) enumeration order
4. Prune: (a) size >= incumbent size, (b) memo on the packed bitset,
   (c) size + ceil(remaining / max marginal) >= incumbent size.
   (a) and (c) only apply once the incumbent covers every coverable point;
   before that, results compare by (points covered desc, size asc)
5. Budget: node count and wall-clock deadline checked at every node entry.
   Exhaustion unwinds every frame through try/finally, restoring the shared
   coverage vector, and the incumbent is returned with completed=False

MEMO KEY:
- Only the covered bitset, not the per-site model choice. Any path that
  picks two models at one site is dominated by the widest of the two, so
  solutions are collapsed with CoverageMatrix.collapse_shared_sites before
  they become the incumbent.

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List, Sequence

import numpy as np

from Hangar_Placement.models.data_models import SearchBudget
from Hangar_Placement.solvers.coverage_matrix import CoverageMatrix
from Hangar_Placement.solvers.solver_config import BranchBoundConfig

# Below CPython's default recursion limit; one frame per search level
MAX_SEARCH_DEPTH = 900


class _BudgetExceeded(Exception):
    """Raised at node entry to unwind the whole search."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


# ===========================================================================
# 📦 OUTCOME RECORD
# ===========================================================================


@dataclass
class BranchAndBoundOutcome:
    """
    Result of one branch-and-bound run.

    Attributes:
        solution: Best candidate indices found (one per site)
        covered_count: Coverable points the solution covers
        nodes_explored: Nodes entered (budget counter)
        nodes_pruned: Nodes cut by a bound, the memo or a sibling cutoff
        completed: True if the tree was exhausted, so solution is minimum
        improved: True if the search found something better than the seed
        stop_reason: "completed", "node_limit", "time_limit" or "depth_limit"
        elapsed_s: Wall-clock time of the run
        newly_uncoverable: Points discovered uncoverable during the search
    """

    solution: List[int]
    covered_count: int
    nodes_explored: int = 0
    nodes_pruned: int = 0
    completed: bool = False
    improved: bool = False
    stop_reason: str = "completed"
    elapsed_s: float = 0.0
    newly_uncoverable: List[int] = field(default_factory=list)

    def as_stats(self) -> Dict[str, Any]:
        return {
            "method": "branch_and_bound",
            "hangar_count": len(self.solution),
            "points_covered": self.covered_count,
            "nodes_explored": self.nodes_explored,
            "nodes_pruned": self.nodes_pruned,
            "completed": self.completed,
            "improved": self.improved,
            "stop_reason": self.stop_reason,
            "elapsed_s": self.elapsed_s,
            "newly_uncoverable": list(self.newly_uncoverable),
        }


# ===========================================================================
# 🌳 SEARCH STATE
# ===========================================================================


class BranchAndBoundSearch:
    """
    Depth-first branch-and-bound over one coverage matrix.

    One instance runs one search. The coverage vector is shared by every
    frame and restored on the way out, so a single (N,) array is allocated
    per run.
    """

    def __init__(
        self,
        matrix: CoverageMatrix,
        initial_solution: Sequence[int] = (),
        budget: Optional[SearchBudget] = None,
        config: Optional[BranchBoundConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if budget is None:
            budget = SearchBudget()
        if config is None:
            config = BranchBoundConfig()

        self.matrix = matrix
        self.config = config
        self.logger = logger
        self.max_nodes = budget.max_nodes
        self.max_time_ms = budget.max_time_ms

        self._cover = matrix.candidate_cover
        self._counts = matrix.point_cover_counts
        # Private copy: points found uncoverable mid-search are dropped from it
        self._target = matrix.coverable_mask.copy()
        self.n_target = int(self._target.sum())

        seed = matrix.collapse_shared_sites(initial_solution)
        self.seed_size = len(seed)
        self.best_solution: List[int] = seed
        self.best_covered = int((matrix.coverage_of(seed) & self._target).sum())

        self.memo: Dict[bytes, int] = {}
        self.nodes_explored = 0
        self.nodes_pruned = 0
        self.improved = False
        self.newly_uncoverable: List[int] = []
        self._deadline: Optional[float] = None

    # -----------------------------------------------------------------------
    # Incumbent handling
    # -----------------------------------------------------------------------

    @property
    def best_is_full(self) -> bool:
        return self.best_covered >= self.n_target

    def _record(self, path: List[int], covered_count: int) -> None:
        """Replace the incumbent if (covered desc, size asc) is better."""
        solution = self.matrix.collapse_shared_sites(path)
        better = covered_count > self.best_covered or (
            covered_count == self.best_covered
            and len(solution) < len(self.best_solution)
        )
        if not better:
            return
        self.best_solution = solution
        self.best_covered = covered_count
        self.improved = True
        if self.logger:
            self.logger.info(
                f"      🎯 New incumbent: {len(solution)} hangars covering "
                f"{covered_count}/{self.n_target} points "
                f"(node {self.nodes_explored})"
            )

    # -----------------------------------------------------------------------
    # Budget
    # -----------------------------------------------------------------------

    def _check_budget(self, depth: int) -> None:
        if self.max_nodes is not None and self.nodes_explored >= self.max_nodes:
            raise _BudgetExceeded("node_limit")
        if self._deadline is not None and time.perf_counter() >= self._deadline:
            raise _BudgetExceeded("time_limit")
        if depth > MAX_SEARCH_DEPTH:
            raise _BudgetExceeded("depth_limit")

    # -----------------------------------------------------------------------
    # Branching helpers
    # -----------------------------------------------------------------------

    def _hardest_point(self, uncovered: np.ndarray) -> int:
        """Uncovered point with the fewest covering candidates (lowest index on ties)."""
        idx = np.flatnonzero(uncovered)
        return int(idx[np.argmin(self._counts[idx])])

    def _ordered_branches(self, point: int, gains: np.ndarray) -> np.ndarray:
        """Candidates covering point, by descending gain, stable on enumeration order."""
        cands = np.flatnonzero(self._cover[:, point])
        return cands[np.argsort(-gains[cands], kind="stable")]

    def root_branches(self) -> List[int]:
        """
        Branch candidates at the root node, in search order.

        Empty when the root is already a goal or a dead end. Used to split
        the tree into independent first-level subtrees.
        """
        uncovered = self._target.copy()
        if not uncovered.any():
            return []
        point = self._hardest_point(uncovered)
        if self._counts[point] == 0:
            return []
        gains = self._cover[:, uncovered].sum(axis=1)
        return [int(k) for k in self._ordered_branches(point, gains)]

    # -----------------------------------------------------------------------
    # Search
    # -----------------------------------------------------------------------

    def run(self, prefix: Sequence[int] = ()) -> BranchAndBoundOutcome:
        """
        Search the subtree below ``prefix`` (the whole tree when empty).

        Returns:
            BranchAndBoundOutcome with the incumbent and counters
        """
        start = time.perf_counter()
        if self.max_time_ms is not None:
            self._deadline = start + self.max_time_ms / 1000.0

        # Uncoverable points start out marked covered
        covered = ~self._target
        path: List[int] = []
        for k in prefix:
            path.append(int(k))
            covered |= self._cover[k]

        stop_reason = "completed"
        try:
            self._search(covered, path)
        except _BudgetExceeded as e:
            stop_reason = e.reason

        elapsed = time.perf_counter() - start
        completed = stop_reason == "completed"

        if self.logger:
            status_emoji = "✅" if completed else "⏱️"
            self.logger.info(
                f"   {status_emoji} Branch-and-bound {stop_reason}: "
                f"{len(self.best_solution)} hangars, "
                f"{self.nodes_explored} nodes explored, "
                f"{self.nodes_pruned} pruned ({elapsed:.2f}s)"
            )

        return BranchAndBoundOutcome(
            solution=list(self.best_solution),
            covered_count=self.best_covered,
            nodes_explored=self.nodes_explored,
            nodes_pruned=self.nodes_pruned,
            completed=completed,
            improved=self.improved,
            stop_reason=stop_reason,
            elapsed_s=elapsed,
            newly_uncoverable=list(self.newly_uncoverable),
        )

    def _search(self, covered: np.ndarray, path: List[int]) -> None:
        size = len(path)
        self._check_budget(size)
        self.nodes_explored += 1

        interval = self.config.progress_log_interval
        if self.logger and interval and self.nodes_explored % interval == 0:
            self.logger.info(
                f"      … {self.nodes_explored} nodes, incumbent "
                f"{len(self.best_solution)} hangars, memo {len(self.memo)}"
            )

        uncovered = self._target & ~covered
        remaining = int(uncovered.sum())

        # === Goal ===
        if remaining == 0:
            self._record(path, self.n_target)
            return

        # === (a) Size bound ===
        if self.best_is_full and size >= len(self.best_solution):
            self.nodes_pruned += 1
            return

        # === (b) Memo ===
        if self.config.use_memoization:
            key = np.packbits(covered).tobytes()
            seen = self.memo.get(key)
            if seen is not None and seen <= size:
                self.nodes_pruned += 1
                return
            self.memo[key] = size

        point = self._hardest_point(uncovered)

        # === Dead end: nothing can cover this point ===
        if self._counts[point] == 0:
            self._target[point] = False
            self.n_target -= 1
            self.newly_uncoverable.append(point)
            if self.logger:
                self.logger.warning(
                    f"   ⚠️ Point #{point} has no covering candidate, "
                    f"treated as uncoverable"
                )
            self._record(path, self.n_target - (remaining - 1))
            return

        gains = self._cover[:, uncovered].sum(axis=1)

        # === (c) Lower bound ===
        if self.config.use_lower_bound and self.best_is_full:
            max_gain = int(gains.max())
            if size + math.ceil(remaining / max_gain) >= len(self.best_solution):
                self.nodes_pruned += 1
                return

        for k in self._ordered_branches(point, gains):
            # Siblings cannot beat an incumbent of size + 1 either
            if self.best_is_full and size + 1 >= len(self.best_solution):
                self.nodes_pruned += 1
                break

            newly = np.flatnonzero(uncovered & self._cover[k])
            covered[newly] = True
            path.append(int(k))
            try:
                self._search(covered, path)
            finally:
                path.pop()
                covered[newly] = False


# ===========================================================================
# 🚀 ENTRY POINT
# ===========================================================================


def solve_branch_and_bound(
    matrix: CoverageMatrix,
    initial_solution: Sequence[int],
    budget: Optional[SearchBudget] = None,
    logger: Optional[logging.Logger] = None,
    config: Optional[BranchBoundConfig] = None,
) -> BranchAndBoundOutcome:
    """
    Run the exact search seeded with an initial (usually greedy) solution.

    Args:
        matrix: Coverage matrix of the solve call
        initial_solution: Candidate indices used as the first incumbent
        budget: Node / wall-clock budget (None = unlimited)
        logger: Optional logger
        config: Pruning switches and progress logging

    Returns:
        BranchAndBoundOutcome; completed=True means the solution is minimum
    """
    if logger:
        logger.info(
            f"   🌳 Branch-and-bound: {matrix.n_candidates} candidates, "
            f"{matrix.n_coverable} coverable points, "
            f"seed {len(initial_solution)} hangars"
        )
    search = BranchAndBoundSearch(
        matrix,
        initial_solution=initial_solution,
        budget=budget,
        config=config,
        logger=logger,
    )
    return search.run()
