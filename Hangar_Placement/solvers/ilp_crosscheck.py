#!/usr/bin/env python3
"""
Hangar Placement ILP Cross-Validation Module

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Optional delegation of the set-cover model to a generic MIP
solver, used to cross-check the branch-and-bound hangar count on instances
where a solver is installed. Never authoritative: every failure is logged and
reported in the stats dict, never raised.

Key Functions:
- cross_validate_with_ilp: Dispatcher (highspy primary, PuLP fallback)
- _solve_ilp_highspy: Native highspy implementation (primary)
- _solve_ilp_pulp_fallback: PuLP fallback (when highspy unavailable)
- compare_with_ilp: Summarise agreement between B&B and ILP counts

MODEL:
    minimize   sum_k w_k * x_k
    subject to sum_{k covers p} x_k >= 1   for each coverable point p
               x_k in {0, 1}
    w_k = 1, or 1 + range_km / 10 with prefer_short_range

SOLVER ARCHITECTURE:
- Primary: Native highspy backend (direct HiGHS API, warm start via setSolution)
- Fallback: PuLP backend (if highspy not installed)
- Neither installed: returns (None, {"method": "ilp_failed", ...})

PARALLELIZATION NOTE:
Keep threads=1 at ILP level. Parallelize at higher level instead.

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
from typing import Dict, Any, Optional, List, Tuple, TYPE_CHECKING

import numpy as np

from Hangar_Placement.solvers.coverage_matrix import CoverageMatrix
from Hangar_Placement.solvers.solver_config import ILPConfig

if TYPE_CHECKING:
    import pulp

# Check for highspy availability at module load
# When available, cross_validate_with_ilp() uses the native highspy backend
HIGHSPY_AVAILABLE = False
try:
    import highspy

    HIGHSPY_AVAILABLE = True
except ImportError:
    # Will use PuLP fallback
    pass


# ===========================================================================
# 🧮 ILP DISPATCHER SECTION
# ===========================================================================


def cross_validate_with_ilp(
    matrix: CoverageMatrix,
    config: Optional[ILPConfig] = None,
    logger: Optional[logging.Logger] = None,
    warm_start_indices: Optional[List[int]] = None,
) -> Tuple[Optional[List[int]], Dict[str, Any]]:
    """Solve the hangar set-cover ILP using highspy (primary) or PuLP (fallback).

    Args:
        matrix: Coverage matrix of the solve call
        config: ILP settings (defaults to ILPConfig())
        logger: Optional logger
        warm_start_indices: Candidate indices to seed as initial solution
            (highspy only)

    Returns:
        Tuple of (selected_candidate_indices, stats_dict) or (None, error_stats)
    """
    if config is None:
        config = ILPConfig()

    coverage = matrix.as_coverage_dict()
    if not coverage:
        if logger:
            logger.info("   ℹ️ ILP cross-check skipped: no coverable points")
        return [], {"method": "ilp_skipped", "reason": "no coverable points"}

    costs = _candidate_costs(matrix, config.prefer_short_range)

    # Primary: Use native highspy backend (always preferred when available)
    if HIGHSPY_AVAILABLE:
        try:
            return _solve_ilp_highspy(
                coverage=coverage,
                costs=costs,
                config=config,
                warm_start_indices=warm_start_indices,
                logger=logger,
            )
        except Exception as e:  # noqa: BLE001
            if logger:
                logger.warning(f"⚠️ ILP solver error (highspy): {e}")
            return None, {"method": "ilp_failed", "reason": str(e)}

    # Fallback: Use PuLP if highspy not installed
    if logger:
        logger.info("   ⚠️ highspy not available, using PuLP fallback")
    if warm_start_indices and logger:
        logger.warning("   ⚠️ Warm start not supported in PuLP fallback")
    return _solve_ilp_pulp_fallback(
        coverage=coverage,
        costs=costs,
        config=config,
        logger=logger,
    )


def _candidate_costs(matrix: CoverageMatrix, prefer_short_range: bool) -> np.ndarray:
    """Objective coefficient per candidate (site-major, model-minor order)."""
    if not prefer_short_range:
        return np.ones(matrix.n_candidates, dtype=np.double)
    range_km = matrix.ranges / 1000.0
    per_model = 1.0 + range_km / 10.0
    return np.tile(per_model, matrix.n_sites).astype(np.double)


def compare_with_ilp(
    hangar_count: int,
    exact: bool,
    ilp_selected: Optional[List[int]],
    ilp_stats: Dict[str, Any],
    logger: Optional[logging.Logger] = None,
) -> Dict[str, Any]:
    """
    Summarise agreement between the branch-and-bound result and the ILP.

    Only an optimal, unweighted ILP count is comparable: a weighted objective
    may legitimately use more hangars.

    Returns:
        Dict with ilp_count, agrees (None when not comparable) and the raw
        ILP stats
    """
    summary: Dict[str, Any] = {"ilp_stats": ilp_stats, "agrees": None}
    if ilp_selected is None:
        return summary

    summary["ilp_count"] = len(ilp_selected)
    comparable = ilp_stats.get("solver_status") == "optimal" and not ilp_stats.get(
        "prefer_short_range", False
    )
    if not comparable:
        return summary

    if exact:
        summary["agrees"] = len(ilp_selected) == hangar_count
    else:
        summary["agrees"] = len(ilp_selected) <= hangar_count

    if logger:
        if summary["agrees"]:
            logger.info(
                f"   ✅ ILP cross-check agrees: {len(ilp_selected)} hangars "
                f"(branch-and-bound: {hangar_count})"
            )
        else:
            logger.warning(
                f"   ⚠️ ILP cross-check disagrees: ILP {len(ilp_selected)} hangars, "
                f"branch-and-bound {hangar_count} (exact={exact})"
            )
    return summary


# ===========================================================================
# 📦 PULP FALLBACK SOLVER SECTION (when highspy not available)
# ===========================================================================


def _get_best_solver(
    config: ILPConfig,
    logger: Optional[logging.Logger] = None,
) -> "pulp.apis.LpSolver":
    """
    Get the best available PuLP solver.

    Priority order:
    1. HiGHS API (uses highspy through PuLP)
    2. CBC (default PuLP solver)
    """
    import pulp

    msg_level = min(config.verbose, 1)  # PuLP uses 0/1 for msg

    try:
        solver = pulp.HiGHS(
            msg=msg_level,
            timeLimit=config.time_limit,
            gapRel=config.mip_gap,
            threads=config.threads,
        )
        if solver.available():
            if logger:
                logger.info("   🚀 Using HiGHS solver (PuLP)")
            return solver
    except Exception:  # noqa: BLE001
        pass

    if logger:
        logger.info("   📦 Using CBC solver (default)")
    return pulp.PULP_CBC_CMD(
        msg=msg_level,
        timeLimit=config.time_limit,
        threads=config.threads,
        gapRel=config.mip_gap,
    )


def _solve_ilp_pulp_fallback(
    coverage: Dict[int, List[int]],
    costs: np.ndarray,
    config: ILPConfig,
    logger: Optional[logging.Logger] = None,
) -> Tuple[Optional[List[int]], Dict[str, Any]]:
    """
    PuLP fallback when highspy is not available.

    Note: Does not support warm start.
    """
    try:
        import pulp
    except ImportError:
        if logger:
            logger.warning("⚠️ Neither highspy nor PuLP installed")
        return None, {"method": "ilp_failed", "reason": "No solver available"}

    n_candidates = len(costs)
    n_coverable = len(coverage)

    if logger:
        logger.info(
            f"   🧮 ILP cross-check (PuLP fallback): {n_candidates} candidates, "
            f"{n_coverable} coverable points"
        )

    prob = pulp.LpProblem("MinimumHangars", pulp.LpMinimize)
    x = [pulp.LpVariable(f"x_{k}", cat="Binary") for k in range(n_candidates)]
    prob += pulp.lpSum(float(costs[k]) * x[k] for k in range(n_candidates)), "TotalHangars"
    for p, covering in coverage.items():
        prob += pulp.lpSum(x[k] for k in covering) >= 1, f"Cover_{p}"

    solver = _get_best_solver(config, logger)

    try:
        prob.solve(solver)
    except Exception as e:  # noqa: BLE001
        if logger:
            logger.warning(f"⚠️ ILP solver error: {e}")
        return None, {"method": "ilp_failed", "reason": str(e)}

    if prob.status != pulp.LpStatusOptimal:
        status_name = pulp.LpStatus.get(prob.status, "Unknown")
        if logger:
            logger.warning(f"⚠️ ILP solver status: {status_name}")
        return None, {"method": "ilp_failed", "reason": status_name}

    selected = [k for k in range(n_candidates) if x[k].value() and x[k].value() > 0.5]

    stats = {
        "method": "ilp_pulp_fallback",
        "solver_status": "optimal",
        "objective_value": pulp.value(prob.objective),
        "n_candidates": n_candidates,
        "points_coverable": n_coverable,
        "prefer_short_range": config.prefer_short_range,
        "warm_start_used": False,
    }

    if logger:
        logger.info(f"   ✅ ILP optimal (PuLP fallback): {len(selected)} hangars")

    return selected, stats


# ===========================================================================
# 🧮 HIGHSPY NATIVE ILP SOLVER SECTION
# ===========================================================================


def _init_highs_solver(config: ILPConfig) -> "highspy.Highs":
    """Initialize HiGHS solver with options."""
    h = highspy.Highs()
    h.setOptionValue("output_flag", config.verbose > 0)
    h.setOptionValue("time_limit", float(config.time_limit))
    h.setOptionValue("mip_rel_gap", config.mip_gap)
    h.setOptionValue("threads", config.threads)
    h.setOptionValue("mip_heuristic_effort", config.mip_heuristic_effort)
    return h


def _add_candidate_variables(h: "highspy.Highs", costs: np.ndarray) -> None:
    """
    Add binary decision variables x_k for each (site, model) candidate.

    Objective: minimize sum(w_k * x_k).
    """
    n_candidates = len(costs)
    lower = np.zeros(n_candidates, dtype=np.double)
    upper = np.ones(n_candidates, dtype=np.double)
    h.addCols(n_candidates, costs.astype(np.double), lower, upper, 0, [], [], [])
    for k in range(n_candidates):
        h.changeColIntegrality(k, highspy.HighsVarType.kInteger)


def _add_coverage_constraints(
    h: "highspy.Highs",
    coverage: Dict[int, List[int]],
) -> None:
    """For each coverable point: sum(x_k covering it) >= 1."""
    for covering in coverage.values():
        h.addRow(
            1.0,
            highspy.kHighsInf,  # >= 1
            len(covering),
            np.array(covering, dtype=np.int32),
            np.ones(len(covering), dtype=np.double),
        )


def _apply_warm_start(
    h: "highspy.Highs",
    warm_start_indices: List[int],
    n_candidates: int,
    logger: Optional[logging.Logger],
) -> None:
    """Seed HiGHS with a known feasible selection via setSolution()."""
    warm_set = set(warm_start_indices)
    solution = highspy.HighsSolution()
    solution.col_value = [1.0 if k in warm_set else 0.0 for k in range(n_candidates)]
    h.setSolution(solution)

    if logger:
        logger.info(f"   🔥 Warm start: {len(warm_start_indices)} candidates seeded")


# Module-level constant: HiGHS status code to name mapping
_HIGHS_STATUS_NAMES: Dict[Any, str] = {}  # Populated at first use


def _get_highs_status_name(model_status: "highspy.HighsModelStatus") -> str:
    """Get human-readable name for HiGHS model status."""
    global _HIGHS_STATUS_NAMES
    if not _HIGHS_STATUS_NAMES:
        _HIGHS_STATUS_NAMES = {
            highspy.HighsModelStatus.kInfeasible: "Infeasible",
            highspy.HighsModelStatus.kUnbounded: "Unbounded",
            highspy.HighsModelStatus.kUnboundedOrInfeasible: "UnboundedOrInfeasible",
            highspy.HighsModelStatus.kNotset: "NotSet",
            highspy.HighsModelStatus.kLoadError: "LoadError",
            highspy.HighsModelStatus.kModelError: "ModelError",
            highspy.HighsModelStatus.kPresolveError: "PresolveError",
            highspy.HighsModelStatus.kSolveError: "SolveError",
            highspy.HighsModelStatus.kPostsolveError: "PostsolveError",
            highspy.HighsModelStatus.kModelEmpty: "ModelEmpty",
            highspy.HighsModelStatus.kTimeLimit: "TimeLimit",
            highspy.HighsModelStatus.kIterationLimit: "IterationLimit",
            highspy.HighsModelStatus.kInterrupt: "Interrupt",
        }
    return _HIGHS_STATUS_NAMES.get(model_status, str(model_status))


def _solve_ilp_highspy(
    coverage: Dict[int, List[int]],
    costs: np.ndarray,
    config: ILPConfig,
    warm_start_indices: Optional[List[int]] = None,
    logger: Optional[logging.Logger] = None,
) -> Tuple[Optional[List[int]], Dict[str, Any]]:
    """
    Solve the hangar set-cover ILP with native highspy.

    Args:
        coverage: Dict mapping coverable point index -> covering candidate indices
        costs: Objective coefficient per candidate
        config: ILP settings
        warm_start_indices: Candidate indices to seed as initial solution
        logger: Optional logger

    Returns:
        Tuple of (selected_candidate_indices, stats_dict) or (None, error_stats)
    """
    n_candidates = len(costs)
    n_coverable = len(coverage)

    # === STEP 1: Initialize HiGHS solver ===
    h = _init_highs_solver(config)

    # === STEP 2: Add candidate selection variables (x_k) ===
    _add_candidate_variables(h, costs)

    if logger:
        logger.info(
            f"   🧮 ILP cross-check (highspy): {n_candidates} candidates, "
            f"{n_coverable} coverable points"
        )

    # === STEP 3: Add coverage constraints ===
    _add_coverage_constraints(h, coverage)

    # === STEP 4: Apply warm start ===
    if warm_start_indices:
        _apply_warm_start(h, warm_start_indices, n_candidates, logger)

    # === STEP 5: Solve ===
    h.run()

    # === STEP 6: Extract solution ===
    model_status = h.getModelStatus()
    has_feasible_solution = model_status in (
        highspy.HighsModelStatus.kOptimal,
        highspy.HighsModelStatus.kTimeLimit,
        highspy.HighsModelStatus.kInterrupt,
    )
    if not has_feasible_solution:
        status_name = _get_highs_status_name(model_status)
        if logger:
            logger.warning(f"⚠️ ILP solver status (highspy): {status_name}")
        return None, {"method": "ilp_failed", "reason": status_name}

    sol = h.getSolution()
    info = h.getInfo()
    if sol.col_value is None or len(sol.col_value) < n_candidates:
        if logger:
            logger.warning("⚠️ No valid ILP solution available")
        return None, {"method": "ilp_failed", "reason": "no_solution"}

    selected = [k for k in range(n_candidates) if sol.col_value[k] > 0.5]

    if model_status == highspy.HighsModelStatus.kOptimal:
        solver_status = "optimal"
    elif model_status == highspy.HighsModelStatus.kTimeLimit:
        solver_status = "time_limit"
    else:
        solver_status = "feasible"

    stats = {
        "method": "ilp_highspy",
        "solver_status": solver_status,
        "objective_value": info.objective_function_value,
        "n_candidates": n_candidates,
        "points_coverable": n_coverable,
        "prefer_short_range": config.prefer_short_range,
        "warm_start_used": bool(warm_start_indices),
    }

    if logger:
        status_emoji = "✅" if solver_status == "optimal" else "⚡"
        logger.info(
            f"   {status_emoji} ILP {solver_status} (highspy): {len(selected)} hangars"
        )

    return selected, stats
