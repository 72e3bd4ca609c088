"""
Result assembly for hangar placement.

Maps the winning candidate indices back to caller-facing SelectedHangar
records and derives the covered/uncovered point partition from the coverage
matrix. The partition is always recomputed from the final selection, never
taken from search state.
"""

import logging
from typing import Dict, Any, Optional, List, Sequence

from Hangar_Placement.models.data_models import (
    DroneModel,
    InspectionPoint,
    SelectedHangar,
    SolveMethod,
    SolveResult,
)
from Hangar_Placement.solvers.coverage_matrix import CoverageMatrix


def selection_records(
    points: Sequence[InspectionPoint],
    models: Sequence[DroneModel],
    matrix: CoverageMatrix,
    solution: Sequence[int],
) -> List[SelectedHangar]:
    """Convert candidate indices to SelectedHangar records (solution order)."""
    selected = []
    for k in solution:
        site, model = matrix.candidate(k)
        site_point = points[int(matrix.site_indices[site])]
        drone = models[model]
        selected.append(
            SelectedHangar(
                hangar_location_id=site_point.point_id,
                drone_model_name=drone.model_name,
                x=site_point.x,
                y=site_point.y,
                range_m=drone.range_m,
            )
        )
    return selected


def assemble_result(
    points: Sequence[InspectionPoint],
    models: Sequence[DroneModel],
    matrix: CoverageMatrix,
    solution: Sequence[int],
    exact: bool,
    nodes_explored: int = 0,
    nodes_pruned: int = 0,
    method: SolveMethod = SolveMethod.BRANCH_AND_BOUND,
    claimed_covered: Optional[int] = None,
    stats: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> SolveResult:
    """
    Build the SolveResult for a finished solve.

    Args:
        points: Inspection points of the call (caller order)
        models: Drone models of the call
        matrix: Coverage matrix of the call
        solution: Winning candidate indices
        exact: Whether the selection is proven minimum
        nodes_explored: Search counter
        nodes_pruned: Search counter
        method: Solver path that produced the selection
        claimed_covered: Points the search believes it covered; checked
            against the recomputed partition when given
        stats: Diagnostic stats to attach
        logger: Optional logger

    Returns:
        SolveResult whose covered/uncovered ids partition the input ids
    """
    solution = matrix.collapse_shared_sites(solution)
    covered_mask = matrix.coverage_of(solution)

    covered_ids = [p.point_id for p, c in zip(points, covered_mask) if c]
    uncovered_ids = [p.point_id for p, c in zip(points, covered_mask) if not c]

    if claimed_covered is not None and claimed_covered != len(covered_ids):
        if logger:
            logger.warning(
                f"   ⚠️ Search claimed {claimed_covered} covered points but the "
                f"final selection covers {len(covered_ids)}; using recomputed partition"
            )

    result = SolveResult(
        selected=selection_records(points, models, matrix, solution),
        covered_ids=covered_ids,
        uncovered_ids=uncovered_ids,
        exact=exact,
        nodes_explored=nodes_explored,
        nodes_pruned=nodes_pruned,
        method=method,
        stats=dict(stats or {}),
    )

    if logger:
        logger.info(f"   📋 {result.summary()}")

    return result
