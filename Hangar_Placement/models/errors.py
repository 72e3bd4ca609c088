"""Exception types raised by the hangar placement solver."""


class HangarPlacementError(Exception):
    """Base class for hangar placement errors."""


class HangarPlacementInputError(HangarPlacementError, ValueError):
    """Invalid solve input, raised before any computation starts."""
