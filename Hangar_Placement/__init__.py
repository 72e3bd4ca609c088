"""
Hangar Placement

Minimum hangar / drone-model placement covering a set of inspection points.
Greedy seed, exact branch-and-bound, optional ILP cross-check.
"""

from Hangar_Placement.config import CONFIG
from Hangar_Placement.models.data_models import (
    DroneModel,
    InspectionPoint,
    SearchBudget,
    SelectedHangar,
    SolveMethod,
    SolveResult,
)
from Hangar_Placement.models.errors import (
    HangarPlacementError,
    HangarPlacementInputError,
)
from Hangar_Placement.solvers.solver_orchestration import (
    solve,
    optimize_hangars,
    verify_coverage,
)

__all__ = [
    "solve",
    "optimize_hangars",
    "verify_coverage",
    "CONFIG",
    "DroneModel",
    "InspectionPoint",
    "SearchBudget",
    "SelectedHangar",
    "SolveMethod",
    "SolveResult",
    "HangarPlacementError",
    "HangarPlacementInputError",
]
