"""
rackplan core - shared enumerations, constants and records.
"""

from .enums import (
    FourDStatus,
    EquipmentType,
    ColorMode,
    CABLE_MANAGED_TYPES,
)

from .models import (
    Position3D,
    Dimensions,
    PlannedMove,
    Coordinates,
    Rack,
    Equipment,
    Building,
    Site,
)

__all__ = [
    # Enumerations
    "FourDStatus",
    "EquipmentType",
    "ColorMode",
    "CABLE_MANAGED_TYPES",
    # Records
    "Position3D",
    "Dimensions",
    "PlannedMove",
    "Coordinates",
    "Rack",
    "Equipment",
    "Building",
    "Site",
]
