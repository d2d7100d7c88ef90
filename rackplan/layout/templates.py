"""
layout/templates.py - Equipment catalog

Manufacturer/model templates used by the layout generator, and the
named presets offered when adding equipment by hand.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from rackplan.core.enums import EquipmentType

__all__ = [
    "EquipmentTemplate",
    "EquipmentPreset",
    "EQUIPMENT_TEMPLATES",
    "EQUIPMENT_PRESETS",
    "DEFAULT_PRESET_POWER_W",
    "templates_for_type",
    "find_template",
    "find_preset",
]

# Power assumed for custom (non-preset) items
DEFAULT_PRESET_POWER_W = 500.0


@dataclass(frozen=True)
class EquipmentTemplate:
    """A manufacturer line: several models sharing height and power draw."""
    equipment_type: EquipmentType
    manufacturer: str
    models: Tuple[str, ...]
    unit_height: int
    power: float


@dataclass(frozen=True)
class EquipmentPreset:
    """A single named item offered by the add-equipment form."""
    name: str
    unit_height: int
    power: float


_T = EquipmentType

EQUIPMENT_TEMPLATES: List[EquipmentTemplate] = [
    # 1U servers
    EquipmentTemplate(_T.SERVER, "Dell", ("PowerEdge R640", "PowerEdge R650"), 1, 550),
    EquipmentTemplate(_T.SERVER, "HP", ("ProLiant DL360 Gen10", "ProLiant DL365 Gen10 Plus"), 1, 500),

    # 2U servers
    EquipmentTemplate(_T.SERVER, "Dell", ("PowerEdge R740", "PowerEdge R740xd", "PowerEdge R750"), 2, 750),
    EquipmentTemplate(_T.SERVER, "HP", ("ProLiant DL380 Gen10", "ProLiant DL385 Gen10 Plus"), 2, 800),
    EquipmentTemplate(_T.SERVER, "Lenovo", ("ThinkSystem SR650", "ThinkSystem SR630"), 2, 750),

    # 4U servers
    EquipmentTemplate(_T.SERVER, "Dell", ("PowerEdge R840", "PowerEdge R940"), 4, 1600),
    EquipmentTemplate(_T.SERVER, "HP", ("ProLiant DL580 Gen10",), 4, 1800),

    # Access switches (1U)
    EquipmentTemplate(_T.SWITCH, "Cisco", ("Catalyst 9300", "Nexus 93180YC-FX"), 1, 350),
    EquipmentTemplate(_T.SWITCH, "Arista", ("7050SX3-48YC12", "7280SR3-48YC8"), 1, 400),
    EquipmentTemplate(_T.SWITCH, "Juniper", ("EX4300-48T", "QFX5120-48Y"), 1, 380),

    # Core switches (2U)
    EquipmentTemplate(_T.SWITCH, "Cisco", ("Nexus 9336C-FX2", "Catalyst 9500-40X"), 2, 650),

    # Routers
    EquipmentTemplate(_T.ROUTER, "Cisco", ("ISR 4451", "ASR 1001-X", "ISR 4431"), 2, 450),
    EquipmentTemplate(_T.ROUTER, "Juniper", ("MX204", "MX150"), 2, 500),

    # Firewalls
    EquipmentTemplate(_T.FIREWALL, "Palo Alto", ("PA-5220", "PA-3220"), 1, 300),
    EquipmentTemplate(_T.FIREWALL, "Fortinet", ("FortiGate 600E", "FortiGate 1800F"), 1, 280),
    EquipmentTemplate(_T.FIREWALL, "Checkpoint", ("6600 Appliance", "16600 Appliance"), 2, 550),

    # Storage
    EquipmentTemplate(_T.STORAGE, "NetApp", ("FAS8200", "FAS8300"), 2, 800),
    EquipmentTemplate(_T.STORAGE, "Dell EMC", ("PowerStore 3200T", "Unity XT 480"), 2, 850),
    EquipmentTemplate(_T.STORAGE, "NetApp", ("AFF A800", "FAS9500"), 4, 1600),
    EquipmentTemplate(_T.STORAGE, "Pure Storage", ("FlashArray//X90", "FlashBlade//S"), 3, 1400),

    # UPS (passive in the power budget)
    EquipmentTemplate(_T.UPS, "APC", ("Smart-UPS SRT 2200", "Smart-UPS SRT 3000"), 2, 0),
    EquipmentTemplate(_T.UPS, "APC", ("Smart-UPS SRT 5000", "Smart-UPS SRT 6000"), 4, 0),
    EquipmentTemplate(_T.UPS, "Eaton", ("9PX 3000RT", "93PR 6000"), 3, 0),

    # PDUs
    EquipmentTemplate(_T.PDU, "APC", ("AP8841 Metered PDU", "AP8861 Switched PDU"), 1, 0),
    EquipmentTemplate(_T.PDU, "Raritan", ("PX3-5466", "PX3-5776"), 1, 0),

    # Patch panels
    EquipmentTemplate(_T.PATCH_PANEL, "Panduit", ("CP48WSBLY", "CP24WSBLY"), 1, 0),
    EquipmentTemplate(_T.PATCH_PANEL, "Leviton", ("49255-H48", "49255-H24"), 1, 0),
]


EQUIPMENT_PRESETS: Dict[EquipmentType, List[EquipmentPreset]] = {
    _T.SERVER: [
        EquipmentPreset("Dell PowerEdge R640", 1, 550),
        EquipmentPreset("Dell PowerEdge R750", 2, 750),
        EquipmentPreset("HP ProLiant DL380 Gen10", 2, 800),
        EquipmentPreset("Dell PowerEdge R840", 4, 1600),
    ],
    _T.SWITCH: [
        EquipmentPreset("Cisco Catalyst 9300", 1, 350),
        EquipmentPreset("Cisco Nexus 9336C-FX2", 2, 650),
        EquipmentPreset("Arista 7050SX3-48YC12", 1, 400),
    ],
    _T.ROUTER: [
        EquipmentPreset("Cisco ISR 4451", 2, 450),
        EquipmentPreset("Juniper MX204", 2, 500),
    ],
    _T.STORAGE: [
        EquipmentPreset("NetApp FAS8300", 2, 800),
        EquipmentPreset("Pure Storage FlashArray//X90", 3, 1400),
        EquipmentPreset("Dell EMC Unity XT 480", 2, 850),
    ],
    _T.UPS: [
        EquipmentPreset("APC Smart-UPS SRT 3000", 2, 0),
        EquipmentPreset("APC Smart-UPS SRT 6000", 4, 0),
        EquipmentPreset("Eaton 9PX 3000RT", 3, 0),
    ],
    _T.FIREWALL: [
        EquipmentPreset("Palo Alto PA-5220", 1, 300),
        EquipmentPreset("Fortinet FortiGate 600E", 1, 280),
        EquipmentPreset("Checkpoint 6600 Appliance", 2, 550),
    ],
    _T.PDU: [
        EquipmentPreset("APC AP8841 Metered PDU", 1, 0),
        EquipmentPreset("Raritan PX3-5466", 1, 0),
    ],
    _T.PATCH_PANEL: [
        EquipmentPreset("Panduit CP48WSBLY", 1, 0),
        EquipmentPreset("Leviton 49255-H48", 1, 0),
    ],
}


def templates_for_type(equipment_type: EquipmentType) -> List[EquipmentTemplate]:
    """All catalog templates of one equipment type, in catalog order."""
    return [t for t in EQUIPMENT_TEMPLATES if t.equipment_type == equipment_type]


def find_template(
    equipment_type: EquipmentType,
    manufacturer: Optional[str] = None,
    unit_height: Optional[int] = None,
    model: Optional[str] = None,
) -> Optional[EquipmentTemplate]:
    """First catalog template matching every given criterion."""
    for template in templates_for_type(equipment_type):
        if manufacturer is not None and template.manufacturer != manufacturer:
            continue
        if unit_height is not None and template.unit_height != unit_height:
            continue
        if model is not None and model not in template.models:
            continue
        return template
    return None


def find_preset(equipment_type: EquipmentType, name: str) -> Optional[EquipmentPreset]:
    for preset in EQUIPMENT_PRESETS.get(equipment_type, []):
        if preset.name == name:
            return preset
    return None
