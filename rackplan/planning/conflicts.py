"""
planning/conflicts.py - Unit range conflict detection

Decides whether a proposed placement overlaps any other active item in the
target rack. Results are values; nothing here raises on a conflict.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union
import logging

from rackplan.core.models import Equipment, Site
from rackplan.geometry.unit_mapper import ranges_overlap

__all__ = [
    "ConflictResult",
    "detect_conflict",
    "has_conflict",
    "occupied_ranges",
]

logger = logging.getLogger(__name__)


@dataclass
class ConflictResult:
    """
    Outcome of a conflict check.

    ``blocking_equipment_id`` is the first overlapping item in collection
    order; ``conflicting_ids`` lists every overlapping item in that order.
    Planned-destination reservations are reported in ``reserved_by``.
    """
    has_conflict: bool
    target_rack_id: str
    target_start: int
    target_end: int
    blocking_equipment_id: Optional[str] = None
    conflicting_ids: List[str] = field(default_factory=list)
    reserved_by: List[str] = field(default_factory=list)

    @property
    def blocked_by_reservation(self) -> bool:
        """True when only pending plans, not installed items, block the range."""
        return self.has_conflict and not self.conflicting_ids

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_conflict": self.has_conflict,
            "target_rack_id": self.target_rack_id,
            "target_start": self.target_start,
            "target_end": self.target_end,
            "blocking_equipment_id": self.blocking_equipment_id,
            "conflicting_ids": list(self.conflicting_ids),
            "reserved_by": list(self.reserved_by),
        }


def _equipment_of(source: Union[Site, Sequence[Equipment]]) -> Sequence[Equipment]:
    return source.equipment if isinstance(source, Site) else source


def occupied_ranges(
    equipment: Iterable[Equipment],
    rack_id: str,
    exclude_id: Optional[str] = None,
    include_planned: bool = False,
) -> List[Tuple[str, int, int, bool]]:
    """
    Ranges that count as occupied in ``rack_id``.

    Returns ``(equipment_id, start, end, is_reservation)`` tuples in
    collection order: installed active items first, then pending
    destinations when ``include_planned`` is set.
    """
    installed = []
    reserved = []
    for item in equipment:
        if item.id == exclude_id or not item.is_active:
            continue
        if item.rack_id == rack_id:
            installed.append((item.id, item.rack_unit, item.unit_end, False))
        if include_planned and item.planned_move is not None:
            plan = item.planned_move
            if plan.target_rack_id == rack_id:
                reserved.append((
                    item.id,
                    plan.target_rack_unit,
                    plan.target_rack_unit + item.unit_height - 1,
                    True,
                ))
    return installed + reserved


def detect_conflict(
    source: Union[Site, Sequence[Equipment]],
    moving_equipment_id: Optional[str],
    target_rack_id: str,
    target_unit: int,
    moving_height: Optional[int] = None,
    include_planned: bool = False,
) -> ConflictResult:
    """
    Check a proposed placement for overlaps.

    Args:
        source: Site or equipment collection
        moving_equipment_id: Item being placed (excluded from the check);
            None for a brand-new item
        target_rack_id: Destination rack
        target_unit: Destination start unit
        moving_height: Height of the placed item; looked up from
            ``moving_equipment_id`` when omitted
        include_planned: Treat other items' pending destinations as occupied

    Returns:
        ConflictResult
    """
    equipment = _equipment_of(source)

    height = moving_height
    if height is None:
        moving = next((e for e in equipment if e.id == moving_equipment_id), None)
        height = moving.unit_height if moving is not None else 1

    target_start = target_unit
    target_end = target_unit + height - 1

    result = ConflictResult(
        has_conflict=False,
        target_rack_id=target_rack_id,
        target_start=target_start,
        target_end=target_end,
    )

    for equipment_id, start, end, reservation in occupied_ranges(
        equipment, target_rack_id, moving_equipment_id, include_planned
    ):
        if not ranges_overlap(start, end, target_start, target_end):
            continue
        if reservation:
            if equipment_id not in result.reserved_by:
                result.reserved_by.append(equipment_id)
        else:
            result.conflicting_ids.append(equipment_id)

    if result.conflicting_ids:
        result.has_conflict = True
        result.blocking_equipment_id = result.conflicting_ids[0]
    elif result.reserved_by:
        result.has_conflict = True
        result.blocking_equipment_id = result.reserved_by[0]

    if result.has_conflict:
        logger.debug(
            f"U{target_start}-U{target_end} in {target_rack_id} blocked by "
            f"{result.blocking_equipment_id}"
        )

    return result


def has_conflict(
    source: Union[Site, Sequence[Equipment]],
    moving_equipment_id: Optional[str],
    target_rack_id: str,
    target_unit: int,
    moving_height: Optional[int] = None,
    include_planned: bool = False,
) -> bool:
    return detect_conflict(
        source, moving_equipment_id, target_rack_id, target_unit,
        moving_height=moving_height, include_planned=include_planned,
    ).has_conflict
