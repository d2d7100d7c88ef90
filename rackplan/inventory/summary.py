"""
inventory/summary.py - Rack utilization and site inventory

Read-only views over a site: per-rack space and power usage, site-wide
counts, the layer-filtered inventory list and free-slot search.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from rackplan.core.enums import EquipmentType, FourDStatus
from rackplan.core.models import Equipment, Site
from rackplan.geometry.unit_mapper import max_start_unit
from rackplan.planning.conflicts import detect_conflict

__all__ = [
    "RackUsage",
    "SiteSummary",
    "rack_usage",
    "site_summary",
    "visible_equipment",
    "find_free_slots",
]


@dataclass
class RackUsage:
    """Space and power usage of one rack (active items only)."""
    rack_id: str
    rack_name: str
    total_units: int
    used_units: int
    equipment_count: int
    power_draw: float
    power_capacity: float

    @property
    def free_units(self) -> int:
        return self.total_units - self.used_units

    @property
    def utilization(self) -> float:
        return self.used_units / self.total_units if self.total_units else 0.0

    @property
    def power_utilization(self) -> float:
        return self.power_draw / self.power_capacity if self.power_capacity else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rack_id": self.rack_id,
            "rack_name": self.rack_name,
            "total_units": self.total_units,
            "used_units": self.used_units,
            "free_units": self.free_units,
            "utilization": round(self.utilization, 4),
            "equipment_count": self.equipment_count,
            "power_draw": self.power_draw,
            "power_capacity": self.power_capacity,
            "power_utilization": round(self.power_utilization, 4),
        }


@dataclass
class SiteSummary:
    """Site-wide inventory counts."""
    site_id: str
    site_name: str
    rack_count: int = 0
    equipment_count: int = 0
    by_status: Dict[str, int] = field(default_factory=dict)
    by_type: Dict[str, int] = field(default_factory=dict)
    total_power: float = 0.0
    pending_moves: int = 0
    racks: List[RackUsage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "site_id": self.site_id,
            "site_name": self.site_name,
            "rack_count": self.rack_count,
            "equipment_count": self.equipment_count,
            "by_status": dict(self.by_status),
            "by_type": dict(self.by_type),
            "total_power": self.total_power,
            "pending_moves": self.pending_moves,
            "racks": [r.to_dict() for r in self.racks],
        }


def rack_usage(site: Site, rack_id: str) -> Optional[RackUsage]:
    """Usage of one rack; None if the rack does not exist."""
    rack = site.get_rack(rack_id)
    if rack is None:
        return None

    items = site.equipment_in_rack(rack_id, active_only=True)
    units = set()
    for item in items:
        units.update(u for u in range(item.rack_unit, item.unit_end + 1) if 1 <= u <= rack.total_units)

    return RackUsage(
        rack_id=rack.id,
        rack_name=rack.name,
        total_units=rack.total_units,
        used_units=len(units),
        equipment_count=len(items),
        power_draw=sum(item.power_consumption for item in items),
        power_capacity=rack.power_capacity,
    )


def site_summary(site: Site) -> SiteSummary:
    """Counts by status and type, active power draw and per-rack usage."""
    summary = SiteSummary(
        site_id=site.id,
        site_name=site.name,
        rack_count=len(site.racks),
        equipment_count=len(site.equipment),
        by_status={status.value: 0 for status in FourDStatus},
        by_type={equipment_type.value: 0 for equipment_type in EquipmentType},
    )

    for item in site.equipment:
        summary.by_status[item.four_d_status.value] += 1
        summary.by_type[item.equipment_type.value] += 1
        if item.is_active:
            summary.total_power += item.power_consumption

    summary.pending_moves = sum(1 for _ in site.planned_equipment())
    summary.racks = [rack_usage(site, rack.id) for rack in site.racks]
    return summary


def visible_equipment(
    site: Site,
    layer_visibility: Mapping[Union[FourDStatus, str], bool],
) -> List[Equipment]:
    """
    Inventory list filtered by status layer, in collection order.

    Statuses missing from ``layer_visibility`` are shown.
    """
    visible = {FourDStatus(key): bool(value) for key, value in layer_visibility.items()}
    return [e for e in site.equipment if visible.get(e.four_d_status, True)]


def find_free_slots(
    site: Site,
    rack_id: str,
    height: int,
    include_planned: bool = True,
) -> List[int]:
    """Every start unit where an item of ``height`` units fits."""
    rack = site.get_rack(rack_id)
    if rack is None or height < 1 or height > rack.total_units:
        return []

    return [
        unit
        for unit in range(1, max_start_unit(rack, height) + 1)
        if not detect_conflict(
            site, None, rack_id, unit,
            moving_height=height, include_planned=include_planned,
        ).has_conflict
    ]
