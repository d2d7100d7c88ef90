"""
layout/ - Synthetic site generation and rack unit allocation.
"""

from .templates import (
    EquipmentTemplate,
    EquipmentPreset,
    EQUIPMENT_TEMPLATES,
    EQUIPMENT_PRESETS,
    DEFAULT_PRESET_POWER_W,
    templates_for_type,
    find_template,
    find_preset,
)
from .allocator import UnitAllocator
from .generator import (
    CityProfile,
    DEFAULT_CITIES,
    LayoutConfig,
    GenerationResult,
    LayoutGenerator,
    generate_layout,
)

__all__ = [
    # Catalog
    "EquipmentTemplate",
    "EquipmentPreset",
    "EQUIPMENT_TEMPLATES",
    "EQUIPMENT_PRESETS",
    "DEFAULT_PRESET_POWER_W",
    "templates_for_type",
    "find_template",
    "find_preset",
    # Allocation
    "UnitAllocator",
    # Generation
    "CityProfile",
    "DEFAULT_CITIES",
    "LayoutConfig",
    "GenerationResult",
    "LayoutGenerator",
    "generate_layout",
]
