"""
Shared fixtures for hangar placement tests.

Run with: python -m pytest Hangar_Placement/_tests -v
"""

import itertools
from typing import List, Optional, Sequence

import numpy as np
import pytest

from Hangar_Placement.models.data_models import DroneModel, InspectionPoint


def make_points(
    xs: Sequence[float],
    eligible: Optional[Sequence[bool]] = None,
    y: float = 0.0,
) -> List[InspectionPoint]:
    """Points p0, p1, ... along one line."""
    if eligible is None:
        eligible = [True] * len(xs)
    return [
        InspectionPoint(point_id=f"p{i}", x=float(x), y=y, can_build_hangar=e)
        for i, (x, e) in enumerate(zip(xs, eligible))
    ]


def random_instance(seed: int, n_points: int = 10, max_sites: int = 6):
    """Random planar instance small enough for exhaustive enumeration."""
    rng = np.random.default_rng(seed)
    coords = rng.uniform(0.0, 10000.0, size=(n_points, 2))
    site_ids = set(rng.choice(n_points, size=max_sites, replace=False).tolist())
    points = [
        InspectionPoint(
            point_id=f"r{i}",
            x=float(coords[i, 0]),
            y=float(coords[i, 1]),
            can_build_hangar=i in site_ids,
        )
        for i in range(n_points)
    ]
    models = [DroneModel("short", 1500.0), DroneModel("long", 3000.0)]
    return points, models


def brute_force_minimum(matrix) -> int:
    """Smallest candidate subset covering every coverable point."""
    target = matrix.coverable_mask
    n_target = int(target.sum())
    if n_target == 0:
        return 0
    for size in range(1, matrix.n_candidates + 1):
        for subset in itertools.combinations(range(matrix.n_candidates), size):
            if int((matrix.coverage_of(list(subset)) & target).sum()) == n_target:
                return size
    raise AssertionError("coverable points must always be coverable")


@pytest.fixture
def greedy_trap():
    """
    Seven points 1 km apart; hangars only at p1, p3, p5; one 2 km drone.

    Greedy takes p3 first (covers p1..p5) and then needs p1 and p5 as well;
    the minimum is p1 + p5.
    """
    points = make_points(
        [0, 1000, 2000, 3000, 4000, 5000, 6000],
        eligible=[False, True, False, True, False, True, False],
    )
    models = [DroneModel("M2", 2000.0)]
    return points, models


@pytest.fixture
def sample_problem():
    """The bundled seven-point sample (EPSG:3857 metres, km ranges)."""
    from Hangar_Placement.config import CONFIG
    from Hangar_Placement.main import load_sample_problem

    return load_sample_problem(CONFIG)
