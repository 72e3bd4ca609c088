#!/usr/bin/env python3
"""
Hangar Placement Coverage Matrix Module

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Precompute which (hangar site, drone model) candidates cover
which inspection points. Built once per solve call and shared read-only by
the greedy heuristic, the branch-and-bound search and the ILP cross-check.

Key Functions:
- build_coverage_matrix: Vectorised site × point × model coverage table
- CoverageMatrix: Container with flattened candidate view and helpers

CANDIDATE ENUMERATION:
- Candidate index k = site_index * n_models + model_index
- Enumeration order (site-major, model-minor) is the deterministic
  tie-break order used by every solver

CONFIGURATION ARCHITECTURE:
- No CONFIG access - all functions accept explicit parameters
- Distances are plane Euclidean (projected frame); no geographic wrap

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from Hangar_Placement.models.data_models import DroneModel, InspectionPoint


# ===========================================================================
# 📦 COVERAGE MATRIX CONTAINER
# ===========================================================================


@dataclass(frozen=True)
class CoverageMatrix:
    """
    Read-only coverage relation for one solve call.

    Attributes:
        site_indices: (E,) indices into the point list of the eligible sites
        covers: (E, N, M) bool, covers[e, p, m] = dist(site_e, p) <= range_m
        candidate_cover: (E*M, N) bool, row k = covers[k // M, :, k % M]
        ranges: (M,) drone model ranges
        uncoverable: sorted indices of points no candidate can cover
    """

    site_indices: np.ndarray
    covers: np.ndarray
    candidate_cover: np.ndarray
    ranges: np.ndarray
    uncoverable: np.ndarray

    @property
    def n_sites(self) -> int:
        return int(self.covers.shape[0])

    @property
    def n_points(self) -> int:
        return int(self.covers.shape[1])

    @property
    def n_models(self) -> int:
        return int(self.covers.shape[2])

    @property
    def n_candidates(self) -> int:
        return int(self.candidate_cover.shape[0])

    @property
    def coverable_mask(self) -> np.ndarray:
        """(N,) bool, True for points at least one candidate covers."""
        return self.candidate_cover.any(axis=0)

    @property
    def n_coverable(self) -> int:
        return self.n_points - len(self.uncoverable)

    @property
    def point_cover_counts(self) -> np.ndarray:
        """(N,) number of candidates able to cover each point."""
        return self.candidate_cover.sum(axis=0)

    def candidate(self, k: int) -> Tuple[int, int]:
        """Split a flattened candidate index into (site_index, model_index)."""
        return divmod(int(k), self.n_models)

    def candidate_index(self, site_index: int, model_index: int) -> int:
        return site_index * self.n_models + model_index

    def covering_candidates(self, point_index: int) -> np.ndarray:
        """Candidate indices (ascending) able to cover a point."""
        return np.flatnonzero(self.candidate_cover[:, point_index])

    def coverage_of(self, candidates: Sequence[int]) -> np.ndarray:
        """(N,) bool union of the coverage of the given candidates."""
        if len(candidates) == 0:
            return np.zeros(self.n_points, dtype=bool)
        return self.candidate_cover[np.asarray(candidates, dtype=np.intp)].any(axis=0)

    def collapse_shared_sites(self, candidates: Sequence[int]) -> List[int]:
        """
        Keep one candidate per site: the widest-range model seen at that site.

        A wider disk at the same site covers a superset of points, so the
        collapsed list covers at least what the input covered. Sites keep
        their first-appearance order; equal ranges keep the earlier candidate.
        """
        best_at_site: Dict[int, int] = {}
        order: List[int] = []
        for k in candidates:
            site, model = self.candidate(k)
            if site not in best_at_site:
                best_at_site[site] = int(k)
                order.append(site)
                continue
            _, kept_model = self.candidate(best_at_site[site])
            if self.ranges[model] > self.ranges[kept_model]:
                best_at_site[site] = int(k)
        return [best_at_site[site] for site in order]

    def as_coverage_dict(self) -> Dict[int, List[int]]:
        """
        Sparse mapping of coverable point index -> covering candidate indices.

        Uncoverable points are omitted, so len(result) == n_coverable.
        """
        coverage = {}
        for p in range(self.n_points):
            covering = self.covering_candidates(p)
            if len(covering):
                coverage[p] = covering.tolist()
        return coverage


# ===========================================================================
# 🔨 COVERAGE MATRIX BUILDER
# ===========================================================================


def build_coverage_matrix(
    points: Sequence[InspectionPoint],
    models: Sequence[DroneModel],
    logger: Optional[logging.Logger] = None,
) -> CoverageMatrix:
    """
    Build the site × point × model coverage table.

    Only points with ``can_build_hangar`` become sites. Cost is
    O(E·N·M) and done once per call, never per search node.

    Args:
        points: Inspection points (caller order is preserved)
        models: Drone models (caller order is preserved)
        logger: Optional logger

    Returns:
        CoverageMatrix for the call
    """
    if logger:
        logger.info("   🔨 Building coverage matrix...")

    site_indices = np.array(
        [i for i, p in enumerate(points) if p.can_build_hangar], dtype=np.intp
    )
    point_coords = np.array([[p.x, p.y] for p in points], dtype=np.double).reshape(
        -1, 2
    )
    ranges = np.array([m.range_m for m in models], dtype=np.double)

    n_sites = len(site_indices)
    n_points = len(points)
    n_models = len(models)

    if n_sites:
        site_coords = point_coords[site_indices]
        # (E, N) plane distances
        deltas = site_coords[:, np.newaxis, :] - point_coords[np.newaxis, :, :]
        distances = np.sqrt(np.sum(deltas**2, axis=2))
        covers = distances[:, :, np.newaxis] <= ranges[np.newaxis, np.newaxis, :]
    else:
        covers = np.zeros((0, n_points, n_models), dtype=bool)

    # (E, N, M) -> (E, M, N) -> (E*M, N): row k = site k // M, model k % M
    candidate_cover = np.ascontiguousarray(
        covers.transpose(0, 2, 1).reshape(n_sites * n_models, n_points)
    )
    uncoverable = np.flatnonzero(~candidate_cover.any(axis=0))

    matrix = CoverageMatrix(
        site_indices=site_indices,
        covers=covers,
        candidate_cover=candidate_cover,
        ranges=ranges,
        uncoverable=uncoverable,
    )

    if logger:
        logger.info(
            f"      {n_sites} sites × {n_points} points × {n_models} models "
            f"= {matrix.n_candidates} candidates"
        )
        if len(uncoverable):
            ids = [points[i].point_id for i in uncoverable]
            logger.warning(
                f"   ⚠️ {len(uncoverable)} points cannot be covered by any "
                f"hangar/drone combination: {ids}"
            )

    return matrix
