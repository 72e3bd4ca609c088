"""
Unit tests for the coverage matrix builder.

Tests:
1. Inclusive range boundary and uncoverable points
2. Candidate enumeration (site-major, model-minor)
3. Shared-site collapsing keeps the widest model
4. No eligible sites

Run with: python -m pytest Hangar_Placement/_tests/test_coverage_matrix.py -v
"""

import logging

import numpy as np
import pytest

from Hangar_Placement.models.data_models import DroneModel, InspectionPoint
from Hangar_Placement.solvers.coverage_matrix import build_coverage_matrix
from Hangar_Placement._tests.conftest import make_points


@pytest.fixture
def line_matrix():
    """Site p0 only; p1 exactly 5 away, p2 20 away; ranges 5 and 10."""
    points = make_points([0, 5, 20], eligible=[True, False, False])
    models = [DroneModel("short", 5.0), DroneModel("long", 10.0)]
    return build_coverage_matrix(points, models)


class TestCoverageMatrixShape:
    """Dimensions and coverage values."""

    def test_dimensions(self, line_matrix):
        """One site, three points, two models."""
        assert line_matrix.covers.shape == (1, 3, 2)
        assert line_matrix.candidate_cover.shape == (2, 3)
        assert line_matrix.n_candidates == 2
        assert line_matrix.site_indices.tolist() == [0]

    def test_range_is_inclusive(self, line_matrix):
        """A point exactly at range distance is covered."""
        assert line_matrix.covers[0, 1, 0]
        assert line_matrix.covers[0, 1, 1]

    def test_far_point_is_uncoverable(self, line_matrix):
        """p2 is out of reach of every candidate."""
        assert line_matrix.uncoverable.tolist() == [2]
        assert line_matrix.coverable_mask.tolist() == [True, True, False]
        assert line_matrix.n_coverable == 2

    def test_point_cover_counts(self, line_matrix):
        assert line_matrix.point_cover_counts.tolist() == [2, 2, 0]

    def test_coverage_dict_omits_uncoverable(self, line_matrix):
        assert line_matrix.as_coverage_dict() == {0: [0, 1], 1: [0, 1]}

    def test_euclidean_distance(self):
        """3-4-5 triangle: distance 5 is within range 5, not within 4.9."""
        points = [
            InspectionPoint("p0", 0.0, 0.0, True),
            InspectionPoint("p1", 3.0, 4.0, False),
        ]
        matrix = build_coverage_matrix(
            points, [DroneModel("a", 4.9), DroneModel("b", 5.0)]
        )
        assert matrix.covers[0, 1].tolist() == [False, True]


class TestCandidateEnumeration:
    """Flattened candidate index k = site * n_models + model."""

    def test_candidate_round_trip(self):
        points = make_points([0, 10])
        models = [DroneModel("a", 1.0), DroneModel("b", 2.0), DroneModel("c", 3.0)]
        matrix = build_coverage_matrix(points, models)

        assert matrix.candidate(4) == (1, 1)
        assert matrix.candidate_index(1, 2) == 5
        for k in range(matrix.n_candidates):
            assert matrix.candidate_index(*matrix.candidate(k)) == k

    def test_candidate_rows_match_covers(self):
        """Row k of the flattened view is covers[site, :, model]."""
        points = make_points([0, 3, 7, 12])
        models = [DroneModel("a", 3.0), DroneModel("b", 8.0)]
        matrix = build_coverage_matrix(points, models)

        for k in range(matrix.n_candidates):
            site, model = matrix.candidate(k)
            np.testing.assert_array_equal(
                matrix.candidate_cover[k], matrix.covers[site, :, model]
            )

    def test_coverage_of_empty_selection(self, line_matrix):
        assert not line_matrix.coverage_of([]).any()


class TestCollapseSharedSites:
    """One model per site, widest range wins."""

    @pytest.fixture
    def matrix(self):
        points = make_points([0, 100])
        models = [DroneModel("narrow", 5.0), DroneModel("wide", 50.0)]
        return build_coverage_matrix(points, models)

    def test_widest_model_kept(self, matrix):
        assert matrix.collapse_shared_sites([0, 1]) == [1]
        assert matrix.collapse_shared_sites([1, 0]) == [1]

    def test_first_appearance_order_kept(self, matrix):
        """Site 1 appears first, so it stays first."""
        assert matrix.collapse_shared_sites([2, 0, 1]) == [2, 1]

    def test_distinct_sites_untouched(self, matrix):
        assert matrix.collapse_shared_sites([0, 3]) == [0, 3]

    def test_equal_range_keeps_first(self):
        points = make_points([0])
        models = [DroneModel("a", 5.0), DroneModel("b", 5.0)]
        matrix = build_coverage_matrix(points, models)
        assert matrix.collapse_shared_sites([1, 0]) == [1]


class TestNoEligibleSites:
    """No hangar can be built anywhere."""

    def test_empty_candidate_set(self):
        points = make_points([0, 1, 2], eligible=[False, False, False])
        matrix = build_coverage_matrix(points, [DroneModel("a", 10.0)])

        assert matrix.n_sites == 0
        assert matrix.n_candidates == 0
        assert matrix.uncoverable.tolist() == [0, 1, 2]
        assert matrix.n_coverable == 0

    def test_uncoverable_points_logged(self, caplog):
        points = make_points([0, 1], eligible=[False, False])
        logger = logging.getLogger("HangarPlacement.test")
        with caplog.at_level(logging.WARNING, logger="HangarPlacement.test"):
            build_coverage_matrix(points, [DroneModel("a", 10.0)], logger)
        assert "cannot be covered" in caplog.text
        assert "p0" in caplog.text
