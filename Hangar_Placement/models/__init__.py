"""Data models package for typed hangar placement inputs and results."""

from .errors import (
    HangarPlacementError,
    HangarPlacementInputError,
)

from .data_models import (
    SolveMethod,
    InspectionPoint,
    DroneModel,
    SearchBudget,
    SelectedHangar,
    SolveResult,
    # Batch conversion utilities
    points_from_dicts,
    # Input validation
    validate_inputs,
)

__all__ = [
    # Errors
    "HangarPlacementError",
    "HangarPlacementInputError",
    # Input models
    "SolveMethod",
    "InspectionPoint",
    "DroneModel",
    "SearchBudget",
    # Output models
    "SelectedHangar",
    "SolveResult",
    # Batch conversion utilities
    "points_from_dicts",
    "validate_inputs",
]
