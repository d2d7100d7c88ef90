"""
geometry - Rack unit geometry mapping.
"""

from .unit_mapper import (
    unit_height,
    max_start_unit,
    clamp_unit,
    unit_to_local_offset,
    local_offset_to_unit,
    world_position_to_unit,
    equipment_position,
    equipment_dimensions,
    unit_span,
    ranges_overlap,
)

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
