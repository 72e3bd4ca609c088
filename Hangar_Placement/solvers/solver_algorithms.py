#!/usr/bin/env python3
"""
Hangar Placement Greedy Solver Module

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Greedy set-cover heuristic over the (site, model) candidate
matrix, plus solver-mode resolution. Produces the upper-bound seed for the
branch-and-bound search and the whole answer in greedy-only mode.

Key Functions:
- solve_greedy: Max-marginal-coverage greedy heuristic
- greedy_lower_bound: Cheap ceil(coverable / widest candidate) lower bound
- resolve_solver_mode: Convert solver mode string to boolean

CONFIGURATION ARCHITECTURE:
- No CONFIG access - all functions accept explicit parameters
- Tie-break is the (site, model) enumeration order of the matrix

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
import math
from typing import Dict, Any, Optional, List, Tuple

import numpy as np

from Hangar_Placement.solvers.coverage_matrix import CoverageMatrix
from Hangar_Placement.solvers.solver_config import GreedyConfig


# ===========================================================================
# 🔧 SOLVER MODE RESOLUTION
# ===========================================================================


def resolve_solver_mode(solver_mode: str = "exact") -> Tuple[bool, str]:
    """
    Resolve solver mode to use_exact boolean.

    BEHAVIOR:
    - "exact": Greedy seed followed by branch-and-bound
    - "greedy": Greedy only, branch-and-bound skipped entirely

    Args:
        solver_mode: "exact" or "greedy" (validated by SolverConfig)

    Returns:
        Tuple of (use_exact: bool, solver_reason: str)

    Raises:
        ValueError: If solver_mode is not a known mode
    """
    if solver_mode == "exact":
        return True, "Branch-and-bound (solver_mode=exact)"
    elif solver_mode == "greedy":
        return False, "Greedy (solver_mode=greedy)"
    raise ValueError(f"Unknown solver_mode: {solver_mode!r}")


# ===========================================================================
# 🔄 GREEDY SOLVER SECTION
# ===========================================================================


def solve_greedy(
    matrix: CoverageMatrix,
    config: Optional[GreedyConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> Tuple[List[int], Dict[str, Any]]:
    """
    Solve hangar placement using the greedy set-cover heuristic.

    Iteratively selects the candidate covering the most still-uncovered
    points. np.argmax returns the first maximum, so ties go to the earliest
    candidate in (site, model) enumeration order.

    STOPPING CONDITIONS (any of these stops the algorithm):
    1. Every coverable point is covered
    2. Best marginal gain is zero
    3. max_iterations reached (safety limit)

    Args:
        matrix: Coverage matrix of the solve call
        config: Greedy settings (defaults to GreedyConfig())
        logger: Optional logger

    Returns:
        Tuple of (selected_candidate_indices, stats_dict)
    """
    if config is None:
        config = GreedyConfig()

    if logger:
        logger.info("   🔄 Solving with greedy heuristic...")

    n_coverable = matrix.n_coverable
    uncovered = matrix.coverable_mask.copy()
    selected: List[int] = []
    iterations = 0

    while (
        matrix.n_candidates
        and uncovered.any()
        and iterations < config.max_iterations
    ):
        iterations += 1

        gains = matrix.candidate_cover[:, uncovered].sum(axis=1)
        best_k = int(np.argmax(gains))
        best_gain = int(gains[best_k])

        if best_gain == 0:
            # Unreachable while uncovered only holds coverable points
            break

        selected.append(best_k)
        uncovered &= ~matrix.candidate_cover[best_k]

        if logger and (iterations <= 5 or iterations % 10 == 0):
            site, model = matrix.candidate(best_k)
            logger.info(
                f"      Iter {iterations}: site #{site} model #{model} "
                f"+{best_gain} points, remaining={int(uncovered.sum())}"
            )

    points_covered = n_coverable - int(uncovered.sum())

    stats = {
        "method": "greedy",
        "iterations": iterations,
        "hangar_count": len(selected),
        "points_covered": points_covered,
        "points_coverable": n_coverable,
        "max_iterations_config": config.max_iterations,
        "complete": points_covered == n_coverable,
    }

    if logger:
        logger.info(
            f"   ✅ Greedy: {len(selected)} hangars in {iterations} iterations "
            f"({points_covered}/{n_coverable} coverable points)"
        )

    return selected, stats


def greedy_lower_bound(matrix: CoverageMatrix) -> int:
    """
    Lower bound on the number of hangars needed to cover every coverable point.

    Any cover needs at least ceil(coverable / widest candidate coverage)
    hangars. When a greedy answer meets this bound it is provably minimum.
    """
    n_coverable = matrix.n_coverable
    if n_coverable == 0 or matrix.n_candidates == 0:
        return 0
    max_gain = int(matrix.candidate_cover.sum(axis=1).max())
    return math.ceil(n_coverable / max_gain)
