"""
planning/operations.py - Equipment add / remove / status operations

Each operation takes a site and returns an ``OperationResult`` carrying the
new site. A refused operation returns the original site together with a
``PlanningIssue`` describing why.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging
import uuid

from rackplan.core.enums import EquipmentType, FourDStatus
from rackplan.core.models import Equipment, Site
from rackplan.errors.taxonomy import (
    ErrorCode,
    PlanningIssue,
    create_bounds_issue,
    create_conflict_issue,
    create_not_found_issue,
    create_rack_missing_issue,
)
from rackplan.geometry.unit_mapper import (
    equipment_dimensions,
    equipment_position,
    max_start_unit,
)
from rackplan.layout.templates import DEFAULT_PRESET_POWER_W, find_preset

from .conflicts import detect_conflict
from .preview import apply_status

__all__ = [
    "EquipmentSpec",
    "OperationResult",
    "add_equipment",
    "remove_equipment",
    "update_equipment_status",
]

logger = logging.getLogger(__name__)

DEFAULT_UNIT_HEIGHT = 2


@dataclass
class EquipmentSpec:
    """
    Description of an item to add.

    When ``name`` matches a catalog preset for ``equipment_type`` the
    preset's height and power win over the given values.
    """
    name: str
    equipment_type: EquipmentType
    rack_id: str
    rack_unit: int
    unit_height: Optional[int] = None
    power_consumption: Optional[float] = None
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    customer: Optional[str] = None
    notes: Optional[str] = None
    equipment_id: Optional[str] = None
    four_d_status: FourDStatus = FourDStatus.PROPOSED


@dataclass
class OperationResult:
    """Outcome of an equipment operation."""
    success: bool
    site: Site
    equipment_id: Optional[str] = None
    issue: Optional[PlanningIssue] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "site_id": self.site.id,
            "equipment_id": self.equipment_id,
            "issue": self.issue.to_dict() if self.issue else None,
        }


def _refused(site: Site, equipment_id: Optional[str], issue: PlanningIssue) -> OperationResult:
    logger.warning(f"{issue.source}: {issue.message}")
    return OperationResult(success=False, site=site, equipment_id=equipment_id, issue=issue)


def _new_equipment_id() -> str:
    return f"EQ-{uuid.uuid4().hex[:9].upper()}"


def add_equipment(site: Site, spec: EquipmentSpec) -> OperationResult:
    """
    Add a new item to a rack.

    Refused when the rack is missing, the range does not fit in the rack,
    or the range overlaps an active item or a pending destination.
    """
    source = "operations.add_equipment"

    rack = site.get_rack(spec.rack_id)
    if rack is None:
        return _refused(site, spec.equipment_id, create_rack_missing_issue(
            message=f"Rack {spec.rack_id} not found in site {site.id}",
            source=source,
            rack_id=spec.rack_id,
        ))

    preset = find_preset(spec.equipment_type, spec.name)
    if preset is not None:
        height = preset.unit_height
        power = float(preset.power)
    else:
        height = spec.unit_height if spec.unit_height is not None else DEFAULT_UNIT_HEIGHT
        power = spec.power_consumption if spec.power_consumption is not None else DEFAULT_PRESET_POWER_W

    if height < 1:
        return _refused(site, spec.equipment_id, PlanningIssue(
            code=ErrorCode.VAL_INVALID_HEIGHT,
            message=f"Unit height must be at least 1, got {height}",
            source=source,
            rack_id=rack.id,
            actual_value=height,
            expected_value=">= 1",
        ))

    if not rack.contains_range(spec.rack_unit, height):
        return _refused(site, spec.equipment_id, create_bounds_issue(
            message=(
                f"{height}U at U{spec.rack_unit} does not fit in {rack.name} "
                f"({rack.total_units}U)"
            ),
            source=source,
            rack_id=rack.id,
            actual=spec.rack_unit,
            max_val=max_start_unit(rack, height),
        ))

    equipment_id = spec.equipment_id or _new_equipment_id()
    if site.get_equipment(equipment_id) is not None:
        return _refused(site, equipment_id, PlanningIssue(
            code=ErrorCode.VAL_FAILED,
            message=f"Equipment id {equipment_id} already exists",
            source=source,
            equipment_id=equipment_id,
        ))

    conflict = detect_conflict(
        site, None, rack.id, spec.rack_unit,
        moving_height=height, include_planned=True,
    )
    if conflict.has_conflict:
        return _refused(site, equipment_id, create_conflict_issue(
            message=(
                f"U{conflict.target_start}-U{conflict.target_end} in {rack.name} "
                f"is occupied by {conflict.blocking_equipment_id}"
            ),
            source=source,
            equipment_id=equipment_id,
            rack_id=rack.id,
            blocking_equipment_id=conflict.blocking_equipment_id,
            reserved=conflict.blocked_by_reservation,
        ))

    words = spec.name.split(" ")
    item = Equipment(
        id=equipment_id,
        name=spec.name,
        equipment_type=spec.equipment_type,
        rack_id=rack.id,
        rack_unit=spec.rack_unit,
        unit_height=height,
        position=equipment_position(rack, spec.rack_unit, height),
        dimensions=equipment_dimensions(rack, height),
        four_d_status=spec.four_d_status,
        manufacturer=spec.manufacturer or words[0] or "Generic",
        model=spec.model or " ".join(words[1:]) or spec.name,
        power_consumption=power,
        serial_number=f"SN-NEW-{equipment_id}",
        asset_tag=f"AT-NEW-{equipment_id}",
        customer=spec.customer,
        notes=spec.notes,
    )

    logger.info(f"Added {item.name} ({height}U) at U{item.rack_unit} in {rack.id}")
    return OperationResult(
        success=True,
        site=site.with_equipment(site.equipment + [item]),
        equipment_id=equipment_id,
    )


def update_equipment_status(
    site: Site,
    equipment_id: str,
    status: FourDStatus,
) -> OperationResult:
    """
    Change an item's 4D status.

    Any status other than ``modified`` drops a pending plan. Bringing an
    existing-removed item back is refused when its range is now taken.
    """
    source = "operations.update_equipment_status"

    item = site.get_equipment(equipment_id)
    if item is None:
        return _refused(site, equipment_id, create_not_found_issue(
            message=f"Equipment {equipment_id} not found in site {site.id}",
            source=source,
            equipment_id=equipment_id,
        ))

    if not item.is_active and status != FourDStatus.EXISTING_REMOVED:
        conflict = detect_conflict(
            site, item.id, item.rack_id, item.rack_unit,
            moving_height=item.unit_height, include_planned=True,
        )
        if conflict.has_conflict:
            return _refused(site, equipment_id, create_conflict_issue(
                message=(
                    f"Cannot restore {item.name}: U{item.rack_unit}-U{item.unit_end} "
                    f"is now occupied by {conflict.blocking_equipment_id}"
                ),
                source=source,
                equipment_id=equipment_id,
                rack_id=item.rack_id,
                blocking_equipment_id=conflict.blocking_equipment_id,
                reserved=conflict.blocked_by_reservation,
            ))

    updated = apply_status(item, status)
    logger.debug(f"{equipment_id}: {item.four_d_status.value} -> {status.value}")
    return OperationResult(
        success=True,
        site=site.replace_equipment(updated),
        equipment_id=equipment_id,
    )


def remove_equipment(site: Site, equipment_id: str) -> OperationResult:
    """Mark an item existing-removed; nothing is deleted."""
    return update_equipment_status(site, equipment_id, FourDStatus.EXISTING_REMOVED)
