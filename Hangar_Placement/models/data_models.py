"""
Typed data models for hangar placement.

Architectural Overview:
=======================
Immutable dataclasses describing what the caller hands to ``solve`` and what
comes back. Points and drone models are owned by the caller; the solver only
refers to them by their index in the caller-supplied sequences.

Key Interactions:
-----------------
- Input: Callers build InspectionPoint / DroneModel / SearchBudget instances
- Output: SolveResult with SelectedHangar records and the covered/uncovered
  point-id partition; as_dict() gives a plain-dict rendering
- Navigation: Use VS Code outline (Ctrl+Shift+O) for quick navigation

Units:
------
Coordinates and ranges share one planar unit (metres in EPSG:3857 for the
usual workflow). DroneModel.from_km() converts kilometre ranges.

MODIFICATION POINT: Add new SolveMethod values here for future solver paths
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, List

from Hangar_Placement.models.errors import HangarPlacementInputError


# ═══════════════════════════════════════════════════════════════════════════
# 🏷️ ENUMS SECTION
# ═══════════════════════════════════════════════════════════════════════════


class SolveMethod(Enum):
    """Which solver path produced the returned selection."""

    BRANCH_AND_BOUND = "branch_and_bound"
    GREEDY = "greedy"
    TRIVIAL = "trivial"


# ═══════════════════════════════════════════════════════════════════════════
# 📍 INPUT DATACLASSES SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class InspectionPoint:
    """A point that must be covered, optionally usable as a hangar site.

    Attributes:
        point_id: Unique identity of the point within one solve call
        x: Planar x coordinate (projected frame, e.g. EPSG:3857 metres)
        y: Planar y coordinate
        can_build_hangar: True if a hangar may be built at this point
    """

    point_id: str
    x: float
    y: float
    can_build_hangar: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "InspectionPoint":
        """Create InspectionPoint from dict.

        Accepts both ``site_eligible`` and ``can_build_hangar`` keys for the
        eligibility flag (default True when neither is present).

        Raises:
            KeyError: If id, x or y are missing
        """
        eligible = d.get("site_eligible", d.get("can_build_hangar", True))
        return cls(
            point_id=str(d["id"]),
            x=float(d["x"]),
            y=float(d["y"]),
            can_build_hangar=bool(eligible),
        )


@dataclass(frozen=True)
class DroneModel:
    """Drone model variant that can be stationed at a hangar.

    A hangar with this model covers every point within ``range_m`` (inclusive)
    of the hangar site.
    """

    model_name: str
    range_m: float

    @classmethod
    def from_km(cls, model_name: str, range_km: float) -> "DroneModel":
        """Create a DroneModel from a range expressed in kilometres."""
        return cls(model_name=model_name, range_m=range_km * 1000.0)


@dataclass(frozen=True)
class SearchBudget:
    """Caller-imposed limit on the exact search.

    Attributes:
        max_nodes: Maximum number of search nodes to expand (None = unlimited).
            0 means the exact search never starts and the greedy result is
            returned as non-exact.
        max_time_ms: Wall-clock deadline in milliseconds (None = unlimited)
    """

    max_nodes: Optional[int] = None
    max_time_ms: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate budget values."""
        if self.max_nodes is not None and self.max_nodes < 0:
            raise HangarPlacementInputError(
                f"max_nodes must be >= 0, got {self.max_nodes}"
            )
        if self.max_time_ms is not None and self.max_time_ms < 0:
            raise HangarPlacementInputError(
                f"max_time_ms must be >= 0, got {self.max_time_ms}"
            )


# ═══════════════════════════════════════════════════════════════════════════
# 🏗️ OUTPUT DATACLASSES SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SelectedHangar:
    """One selected placement: a hangar site plus the drone model stationed there."""

    hangar_location_id: str
    drone_model_name: str
    x: float
    y: float
    range_m: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            "site_id": self.hangar_location_id,
            "model_name": self.drone_model_name,
            "x": self.x,
            "y": self.y,
            "range": self.range_m,
        }


@dataclass
class SolveResult:
    """Output of a single ``solve`` call.

    ``covered_ids`` and ``uncovered_ids`` always partition the input point ids
    and keep the caller's point order.

    Attributes:
        selected: Selected hangar placements (at most one per site)
        covered_ids: Ids of points within range of at least one selection
        uncovered_ids: Ids of all remaining points (includes uncoverable ones)
        exact: True if the selection is proven minimum for the coverable subset
        nodes_explored: Branch-and-bound nodes expanded
        nodes_pruned: Branch-and-bound nodes cut by a pruning rule
        method: Solver path that produced the selection
        stats: Diagnostic statistics (greedy/B&B/cross-validation details)
    """

    selected: List[SelectedHangar]
    covered_ids: List[str]
    uncovered_ids: List[str]
    exact: bool
    nodes_explored: int = 0
    nodes_pruned: int = 0
    method: SolveMethod = SolveMethod.BRANCH_AND_BOUND
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_points(self) -> int:
        return len(self.covered_ids) + len(self.uncovered_ids)

    @property
    def covered_points(self) -> int:
        return len(self.covered_ids)

    @property
    def coverage_rate(self) -> float:
        """Fraction of input points covered (1.0 when there are no points)."""
        total = self.total_points
        return self.covered_points / total if total else 1.0

    @property
    def hangar_count(self) -> int:
        return len(self.selected)

    def summary(self) -> str:
        """One-line human readable summary."""
        status = "exact" if self.exact else "non-exact"
        return (
            f"{self.hangar_count} hangars ({status}, {self.method.value}), "
            f"covered {self.covered_points}/{self.total_points} points "
            f"({self.coverage_rate * 100:.1f}%)"
        )

    def as_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict (selection records as dicts)."""
        return {
            "selected": [s.as_dict() for s in self.selected],
            "covered_ids": list(self.covered_ids),
            "uncovered_ids": list(self.uncovered_ids),
            "exact": self.exact,
            "nodes_explored": self.nodes_explored,
            "nodes_pruned": self.nodes_pruned,
            "method": self.method.value,
            "total_points": self.total_points,
            "covered_points": self.covered_points,
            "coverage_rate": self.coverage_rate,
        }


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════


def points_from_dicts(records: List[Dict[str, Any]]) -> List[InspectionPoint]:
    """Convert a list of point dicts to InspectionPoint instances."""
    return [InspectionPoint.from_dict(r) for r in records]


def validate_inputs(
    points: List[InspectionPoint], models: List[DroneModel]
) -> None:
    """Fail fast on invalid solve inputs.

    Raises:
        HangarPlacementInputError: Empty point/model list, duplicate point id,
            duplicate model name, non-finite coordinate, or a range that is
            not a finite positive number
    """
    if not points:
        raise HangarPlacementInputError("points must not be empty")
    if not models:
        raise HangarPlacementInputError("models must not be empty")

    seen_ids = set()
    for p in points:
        if p.point_id in seen_ids:
            raise HangarPlacementInputError(f"Duplicate point id: {p.point_id!r}")
        seen_ids.add(p.point_id)
        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            raise HangarPlacementInputError(
                f"Point {p.point_id!r} has non-finite coordinates ({p.x}, {p.y})"
            )

    seen_names = set()
    for m in models:
        if m.model_name in seen_names:
            raise HangarPlacementInputError(
                f"Duplicate drone model name: {m.model_name!r}"
            )
        seen_names.add(m.model_name)
        if not math.isfinite(m.range_m) or m.range_m <= 0:
            raise HangarPlacementInputError(
                f"Drone model {m.model_name!r} range must be > 0, got {m.range_m}"
            )
