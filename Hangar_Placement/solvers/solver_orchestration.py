#!/usr/bin/env python3
"""
Hangar Placement Solver Orchestration Module

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Orchestrate one hangar placement solve: validate inputs,
build the coverage matrix, run the greedy → branch-and-bound chain, optionally
cross-check with an ILP solver, and assemble the result.

Key Functions:
- solve: Public entry point (points, models, budget)
- optimize_hangars: SolverConfig-based entry point
- verify_coverage: Geometric re-check of a result with shapely disks

CONFIGURATION ARCHITECTURE:
- No CONFIG access - all functions accept explicit parameters
- Solver selection delegated to resolve_solver_mode()

FALLBACK CHAIN:
- No sites / nothing coverable → trivial exact result
- Greedy always runs (seed and fallback)
- Branch-and-bound improves on greedy; budget exhaustion returns the best
  selection found with exact=False

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
import time
from typing import Dict, Any, Optional, List, Sequence

import numpy as np
import shapely
from shapely.geometry import Point
from shapely.ops import unary_union

from Hangar_Placement.models.data_models import (
    DroneModel,
    InspectionPoint,
    SearchBudget,
    SolveMethod,
    SolveResult,
    validate_inputs,
)
from Hangar_Placement.solvers.branch_and_bound import solve_branch_and_bound
from Hangar_Placement.solvers.coverage_matrix import build_coverage_matrix
from Hangar_Placement.solvers.ilp_crosscheck import (
    compare_with_ilp,
    cross_validate_with_ilp,
)
from Hangar_Placement.solvers.result_assembly import assemble_result
from Hangar_Placement.solvers.solver_algorithms import (
    greedy_lower_bound,
    resolve_solver_mode,
    solve_greedy,
)
from Hangar_Placement.solvers.solver_config import (
    SolverConfig,
    create_default_config,
)


# ===========================================================================
# 🏗️ MAIN ORCHESTRATION SECTION
# ===========================================================================


def solve(
    points: Sequence[InspectionPoint],
    models: Sequence[DroneModel],
    budget: Optional[SearchBudget] = None,
    config: Optional[SolverConfig] = None,
) -> SolveResult:
    """
    Select a minimum set of (hangar site, drone model) placements covering
    as many inspection points as possible.

    Args:
        points: Inspection points; eligible ones double as hangar sites
        models: Drone models that can be stationed at a hangar
        budget: Search budget (overrides config.budget when given)
        config: SolverConfig (defaults to create_default_config())

    Returns:
        SolveResult

    Raises:
        HangarPlacementInputError: Invalid points, models or budget

    Example:
        >>> result = solve(points, models, SearchBudget(max_time_ms=2000))
        >>> result.exact, [h.hangar_location_id for h in result.selected]
    """
    if config is None:
        config = create_default_config()
    if budget is not None:
        config = config.with_modifications(budget=budget)
    return optimize_hangars(points, models, config)


def optimize_hangars(
    points: Sequence[InspectionPoint],
    models: Sequence[DroneModel],
    config: Optional[SolverConfig] = None,
) -> SolveResult:
    """
    Compute optimal hangar placements using SolverConfig.

    Args:
        points: Inspection points
        models: Drone models
        config: SolverConfig object (use factory functions to create):

            - ``create_default_config()``: greedy seed + exact search
            - ``create_fast_config()``: greedy only
            - ``create_parallel_config()``: subtrees across joblib workers
            - ``create_validated_config()``: ILP cross-check + shapely check
            - ``config_from_project_config(CONFIG)``: From project CONFIG dict

    Returns:
        SolveResult
    """
    if config is None:
        config = create_default_config()
    logger = config.logger

    points = list(points)
    models = list(models)
    validate_inputs(points, models)

    opt_start = time.perf_counter()
    opt_times: Dict[str, float] = {}

    use_exact, solver_reason = resolve_solver_mode(config.solver_mode)
    if logger:
        logger.info(
            f"🎯 Hangar placement: {len(points)} points, {len(models)} drone models"
        )
        logger.info(f"   Solver: {solver_reason}")

    # === STEP 1: Coverage matrix ===
    step_start = time.perf_counter()
    matrix = build_coverage_matrix(points, models, logger)
    opt_times["coverage_matrix"] = time.perf_counter() - step_start

    stats: Dict[str, Any] = {
        "solver_reason": solver_reason,
        "n_points": matrix.n_points,
        "n_sites": matrix.n_sites,
        "n_models": matrix.n_models,
        "n_candidates": matrix.n_candidates,
        "uncoverable_ids": [points[i].point_id for i in matrix.uncoverable],
        "timing": opt_times,
    }

    # === STEP 2: Trivial instances ===
    if matrix.n_sites == 0 or matrix.n_coverable == 0:
        if logger:
            reason = "no eligible hangar sites" if matrix.n_sites == 0 else "no coverable points"
            logger.warning(f"   ⚠️ Nothing to place: {reason}")
        result = assemble_result(
            points,
            models,
            matrix,
            solution=[],
            exact=True,
            method=SolveMethod.TRIVIAL,
            stats=stats,
            logger=logger,
        )
        return _finish(result, points, models, config, opt_start)

    # === STEP 3: Greedy seed ===
    step_start = time.perf_counter()
    greedy_solution, greedy_stats = solve_greedy(matrix, config.greedy, logger)
    opt_times["greedy"] = time.perf_counter() - step_start
    stats["greedy"] = greedy_stats

    if not use_exact:
        solution = matrix.collapse_shared_sites(greedy_solution)
        lower_bound = greedy_lower_bound(matrix)
        exact = greedy_stats["complete"] and len(solution) <= lower_bound
        stats["greedy_lower_bound"] = lower_bound
        method = SolveMethod.GREEDY
        nodes_explored = nodes_pruned = 0
        claimed_covered = greedy_stats["points_covered"]
    else:
        # === STEP 4: Exact search seeded by greedy ===
        step_start = time.perf_counter()
        if config.parallel.enabled:
            from Hangar_Placement.parallel.subtree_orchestrator import (
                solve_branch_and_bound_parallel,
            )

            outcome = solve_branch_and_bound_parallel(
                matrix,
                greedy_solution,
                budget=config.budget,
                parallel_config=config.parallel,
                bnb_config=config.branch_bound,
                log=logger,
            )
        else:
            outcome = solve_branch_and_bound(
                matrix,
                greedy_solution,
                config.budget,
                logger=logger,
                config=config.branch_bound,
            )
        opt_times["branch_and_bound"] = time.perf_counter() - step_start
        stats["branch_and_bound"] = outcome.as_stats()

        solution = outcome.solution
        exact = outcome.completed
        nodes_explored = outcome.nodes_explored
        nodes_pruned = outcome.nodes_pruned
        claimed_covered = outcome.covered_count
        if outcome.completed or outcome.improved:
            method = SolveMethod.BRANCH_AND_BOUND
        else:
            method = SolveMethod.GREEDY
            if logger:
                logger.info(
                    f"   ↩️ Budget exhausted ({outcome.stop_reason}), "
                    f"keeping greedy result"
                )

    # === STEP 5: Optional ILP cross-check ===
    if config.ilp.enabled:
        step_start = time.perf_counter()
        ilp_selected, ilp_stats = cross_validate_with_ilp(
            matrix, config.ilp, logger, warm_start_indices=list(solution)
        )
        stats["ilp_crosscheck"] = compare_with_ilp(
            hangar_count=len(matrix.collapse_shared_sites(solution)),
            exact=exact,
            ilp_selected=ilp_selected,
            ilp_stats=ilp_stats,
            logger=logger,
        )
        opt_times["ilp_crosscheck"] = time.perf_counter() - step_start

    # === STEP 6: Assemble ===
    result = assemble_result(
        points,
        models,
        matrix,
        solution=solution,
        exact=exact,
        nodes_explored=nodes_explored,
        nodes_pruned=nodes_pruned,
        method=method,
        claimed_covered=claimed_covered,
        stats=stats,
        logger=logger,
    )
    return _finish(result, points, models, config, opt_start)


def _finish(
    result: SolveResult,
    points: List[InspectionPoint],
    models: List[DroneModel],
    config: SolverConfig,
    opt_start: float,
) -> SolveResult:
    """Attach optional geometric verification and total timing."""
    if config.verify_geometry:
        result.stats["verification"] = verify_coverage(
            result, points, models, logger=config.logger
        )
    result.stats.setdefault("timing", {})["total"] = time.perf_counter() - opt_start
    return result


# ===========================================================================
# ✅ VERIFICATION SECTION
# ===========================================================================


def verify_coverage(
    result: SolveResult,
    points: Sequence[InspectionPoint],
    models: Optional[Sequence[DroneModel]] = None,
    tolerance: float = 1e-6,
    logger: Optional[logging.Logger] = None,
) -> Dict[str, Any]:
    """
    Verify a result geometrically, independent of the coverage matrix.

    Each selected hangar becomes a disk of its drone model's range; a point
    is covered when it lies within ``range + tolerance`` of any hangar.

    Args:
        result: SolveResult to check
        points: The inspection points of the solve call
        models: Drone models (ranges looked up by name; falls back to the
            range recorded on the selection)
        tolerance: Distance slack for floating point boundary cases
        logger: Optional logger

    Returns:
        Dict with verification results (covered_count, coverage_percentage,
        is_complete, mismatched_ids, footprint_area)
    """
    total = len(points)
    if total == 0:
        return {
            "covered_count": 0,
            "coverage_percentage": 100.0,
            "is_complete": True,
            "mismatched_ids": [],
            "footprint_area": 0.0,
        }

    range_by_name = {m.model_name: m.range_m for m in (models or [])}
    point_geoms = shapely.points(np.array([[p.x, p.y] for p in points], dtype=float))

    geo_covered = np.zeros(total, dtype=bool)
    disks = []
    for hangar in result.selected:
        radius = range_by_name.get(hangar.drone_model_name, hangar.range_m)
        centre = Point(hangar.x, hangar.y)
        geo_covered |= shapely.dwithin(point_geoms, centre, radius + tolerance)
        disks.append(centre.buffer(radius))

    footprint_area = unary_union(disks).area if disks else 0.0

    reported = set(result.covered_ids)
    mismatched_ids = [
        p.point_id for p, c in zip(points, geo_covered) if bool(c) != (p.point_id in reported)
    ]

    covered_count = int(geo_covered.sum())
    coverage_pct = covered_count / total * 100

    verification = {
        "covered_count": covered_count,
        "coverage_percentage": coverage_pct,
        "is_complete": covered_count == total,
        "mismatched_ids": mismatched_ids,
        "footprint_area": footprint_area,
    }

    if logger:
        status = "✅ Complete" if verification["is_complete"] else "⚠️ Incomplete"
        logger.info(
            f"   {status}: {coverage_pct:.1f}% of points within hangar range "
            f"({footprint_area / 1e6:.1f} km² footprint)"
        )
        if mismatched_ids:
            logger.warning(
                f"   ⚠️ Geometric check disagrees on {len(mismatched_ids)} points: "
                f"{mismatched_ids}"
            )

    return verification
