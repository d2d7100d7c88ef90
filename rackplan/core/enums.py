"""
rackplan Core Enumerations

Enumeration types shared by the layout, planning and session layers.
Values are the wire strings used in persisted snapshots and API payloads.
"""

from enum import Enum


class FourDStatus(str, Enum):
    """
    Lifecycle ("4D") status of a rack or equipment item.
    """
    EXISTING_RETAINED = "existing-retained"
    EXISTING_REMOVED = "existing-removed"  # Exempt from occupancy checks
    PROPOSED = "proposed"
    FUTURE = "future"
    MODIFIED = "modified"                  # Item is being relocated


class EquipmentType(str, Enum):
    """
    Rack-mounted equipment categories.
    """
    SERVER = "server"
    SWITCH = "switch"
    ROUTER = "router"
    UPS = "ups"
    PDU = "pdu"
    PATCH_PANEL = "patch-panel"
    STORAGE = "storage"
    FIREWALL = "firewall"


class ColorMode(str, Enum):
    """
    Viewer coloring preference. Persisted, never interpreted by the core.
    """
    FOUR_D_STATUS = "fourDStatus"
    CUSTOMER = "customer"
    POWER_CONSUMPTION = "powerConsumption"


# Categories that get an optional cable-management gap during generation
CABLE_MANAGED_TYPES = frozenset({EquipmentType.SWITCH, EquipmentType.ROUTER})
