"""
planning/preview.py - Move previews and plan records

Pure functions behind the move planner: evaluate a destination, record an
accepted destination on an equipment item, and drop it again. Inputs are
never mutated.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional
import logging

from rackplan.core.enums import FourDStatus
from rackplan.core.models import Equipment, PlannedMove, Site

from .conflicts import detect_conflict

__all__ = [
    "MovePreview",
    "build_preview",
    "plan_move",
    "commit_plan",
    "clear_plan",
    "apply_status",
]

logger = logging.getLogger(__name__)


@dataclass
class MovePreview:
    """
    Evaluation of a candidate destination.

    A preview may describe an invalid placement; it is only acted on when
    ``is_valid``.
    """
    equipment_id: str
    target_rack_id: str
    target_rack_unit: int
    has_conflict: bool = False
    blocking_equipment_id: Optional[str] = None
    within_bounds: bool = True
    rack_exists: bool = True
    equipment_exists: bool = True
    reserved: bool = False  # Blocked by another item's pending destination

    @property
    def is_valid(self) -> bool:
        return (
            self.equipment_exists
            and self.rack_exists
            and self.within_bounds
            and not self.has_conflict
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "equipment_id": self.equipment_id,
            "target_rack_id": self.target_rack_id,
            "target_rack_unit": self.target_rack_unit,
            "has_conflict": self.has_conflict,
            "blocking_equipment_id": self.blocking_equipment_id,
            "within_bounds": self.within_bounds,
            "rack_exists": self.rack_exists,
            "equipment_exists": self.equipment_exists,
            "reserved": self.reserved,
            "is_valid": self.is_valid,
        }


def build_preview(
    site: Site,
    equipment: Equipment,
    target_rack_id: str,
    target_unit: int,
    include_planned: bool = True,
) -> MovePreview:
    """Evaluate moving ``equipment`` to ``target_unit`` of ``target_rack_id``."""
    preview = MovePreview(
        equipment_id=equipment.id,
        target_rack_id=target_rack_id,
        target_rack_unit=target_unit,
    )

    rack = site.get_rack(target_rack_id)
    if rack is None:
        preview.rack_exists = False
        preview.within_bounds = False
        return preview

    preview.within_bounds = rack.contains_range(target_unit, equipment.unit_height)

    conflict = detect_conflict(
        site,
        equipment.id,
        target_rack_id,
        target_unit,
        moving_height=equipment.unit_height,
        include_planned=include_planned,
    )
    preview.has_conflict = conflict.has_conflict
    preview.blocking_equipment_id = conflict.blocking_equipment_id
    preview.reserved = conflict.blocked_by_reservation

    return preview


def plan_move(
    site: Site,
    equipment_id: str,
    target_rack_id: str,
    target_unit: int,
) -> MovePreview:
    """
    Preview a relocation without changing anything.

    An unknown equipment id yields an invalid preview rather than an error.
    """
    equipment = site.get_equipment(equipment_id)
    if equipment is None:
        return MovePreview(
            equipment_id=equipment_id,
            target_rack_id=target_rack_id,
            target_rack_unit=target_unit,
            rack_exists=site.get_rack(target_rack_id) is not None,
            within_bounds=False,
            equipment_exists=False,
        )
    return build_preview(site, equipment, target_rack_id, target_unit)


def commit_plan(equipment: Equipment, preview: MovePreview) -> Equipment:
    """
    Record the preview's destination as the item's planned move.

    The item stays at its origin. The origin position is snapshotted once;
    re-planning keeps the first snapshot. An invalid preview, or one for a
    different item, returns the item unchanged.
    """
    if preview.equipment_id != equipment.id or not preview.is_valid:
        logger.debug(f"Plan for {equipment.id} not recorded: preview is not valid")
        return equipment

    snapshot = equipment.previous_position
    if snapshot is None:
        snapshot = replace(equipment.position)

    return replace(
        equipment,
        planned_move=PlannedMove(
            target_rack_id=preview.target_rack_id,
            target_rack_unit=preview.target_rack_unit,
        ),
        previous_position=snapshot,
    )


def clear_plan(equipment: Equipment) -> Equipment:
    """Drop the planned move and the origin snapshot."""
    if equipment.planned_move is None and equipment.previous_position is None:
        return equipment
    return replace(equipment, planned_move=None, previous_position=None)


def apply_status(equipment: Equipment, status: FourDStatus) -> Equipment:
    """
    Status side channel.

    ``modified`` keeps any pending plan (the item is being moved); every
    other status drops it.
    """
    if status == FourDStatus.MODIFIED:
        return replace(equipment, four_d_status=status)
    return replace(clear_plan(equipment), four_d_status=status)
