"""
rackplan/geometry/unit_mapper.py - Rack unit <-> vertical coordinate mapping

Pure conversions between a rack unit index and the vertical placement of an
item in that rack. Units are 1-based and counted upward from the rack base.
"""

from __future__ import annotations
from typing import Tuple
import math

from rackplan.core.constants import (
    STANDARD_EQUIPMENT_DEPTH,
    STANDARD_EQUIPMENT_WIDTH,
    UNIT_EPSILON,
)
from rackplan.core.models import Dimensions, Position3D, Rack

__all__ = [
    "unit_height",
    "max_start_unit",
    "clamp_unit",
    "unit_to_local_offset",
    "local_offset_to_unit",
    "world_position_to_unit",
    "equipment_position",
    "equipment_dimensions",
    "unit_span",
    "ranges_overlap",
]


def unit_height(rack: Rack) -> float:
    """Height of one rack unit."""
    return rack.dimensions.height / rack.total_units


def max_start_unit(rack: Rack, item_height_units: int) -> int:
    """Highest start unit at which an item of this height still fits (min 1)."""
    return max(1, rack.total_units - item_height_units + 1)


def clamp_unit(rack: Rack, unit: int, item_height_units: int) -> int:
    """Clamp a start unit so the whole item stays inside the rack."""
    return max(1, min(unit, max_start_unit(rack, item_height_units)))


def unit_to_local_offset(rack: Rack, unit: int, item_height_units: int) -> float:
    """
    Vertical offset of an item's center, measured from the rack base.

    Args:
        rack: Rack the item is mounted in
        unit: 1-based start unit
        item_height_units: Item height in units

    Returns:
        ``(unit - 1) * uh + item_height_units * uh / 2``
    """
    uh = unit_height(rack)
    return (unit - 1) * uh + (item_height_units * uh) / 2


def local_offset_to_unit(rack: Rack, offset: float, item_height_units: int) -> int:
    """
    Inverse of ``unit_to_local_offset``, clamped to the rack.

    The offset is read as the item's center. For 1U items this reduces to
    ``floor(offset / uh) + 1``; taller items shift by half their extra height
    so that the center of the item maps back to its start unit.
    """
    uh = unit_height(rack)
    raw = offset / uh - (item_height_units - 1) / 2
    unit = math.floor(raw + UNIT_EPSILON) + 1
    return clamp_unit(rack, unit, item_height_units)


def world_position_to_unit(rack: Rack, world_y: float, item_height_units: int) -> int:
    """
    Nearest valid start unit for a world-space vertical coordinate.

    Never returns less than 1 or more than ``total_units - height + 1``.
    """
    return local_offset_to_unit(rack, world_y - rack.base_y, item_height_units)


def equipment_position(rack: Rack, unit: int, item_height_units: int) -> Position3D:
    """World position of an item mounted at ``unit`` in ``rack``."""
    return Position3D(
        x=rack.position.x,
        y=rack.base_y + unit_to_local_offset(rack, unit, item_height_units),
        z=rack.position.z,
    )


def equipment_dimensions(rack: Rack, item_height_units: int) -> Dimensions:
    """Normalized footprint; only the height depends on the unit count."""
    return Dimensions(
        width=STANDARD_EQUIPMENT_WIDTH,
        height=item_height_units * unit_height(rack),
        depth=STANDARD_EQUIPMENT_DEPTH,
    )


def unit_span(unit: int, item_height_units: int) -> Tuple[int, int]:
    """Inclusive unit range occupied by an item."""
    return unit, unit + item_height_units - 1


def ranges_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Inclusive unit ranges intersect."""
    return not (a_end < b_start or a_start > b_end)
