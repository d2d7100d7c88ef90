"""
layout/generator.py - Synthetic site generation

Builds demo sites: one building per city, a grid of racks and a randomized
equipment mix per rack. Every placement goes through a per-rack
``UnitAllocator`` so active items never overlap.

The random source is injectable; the same seed produces identical sites,
including equipment ids, serial numbers and asset tags.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple
import logging
import math
import random
import string
import time

from rackplan.core.constants import (
    BUILDING_DIMENSIONS,
    DEFAULT_RACK_DEPTH,
    DEFAULT_RACK_HEIGHT,
    DEFAULT_RACK_POWER_CAPACITY_W,
    DEFAULT_RACK_WIDTH,
    DEFAULT_TOTAL_UNITS,
    RACK_COLUMN_SPACING,
    RACK_ROW_ORIGIN_X,
    RACK_ROW_ORIGIN_Z,
    RACK_ROW_SPACING,
)
from rackplan.core.enums import CABLE_MANAGED_TYPES, EquipmentType, FourDStatus
from rackplan.core.models import (
    Building,
    Coordinates,
    Dimensions,
    Equipment,
    Position3D,
    Rack,
    Site,
)
from rackplan.geometry.unit_mapper import equipment_dimensions, equipment_position
from rackplan.validators.occupancy import ValidationResult, validate_site

from .allocator import UnitAllocator
from .templates import EquipmentTemplate, find_template, templates_for_type

__all__ = [
    'CityProfile',
    'DEFAULT_CITIES',
    'LayoutConfig',
    'GenerationResult',
    'LayoutGenerator',
    'generate_layout',
]

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_uppercase + string.digits

EXISTING_INSTALL_DATE = "2023-01-15"


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class CityProfile:
    """City a synthetic site is placed in."""
    name: str
    state: str
    lat: float
    lng: float


DEFAULT_CITIES: Tuple[CityProfile, ...] = (
    CityProfile("New York", "NY", 40.7128, -74.0060),
    CityProfile("Los Angeles", "CA", 34.0522, -118.2437),
    CityProfile("Chicago", "IL", 41.8781, -87.6298),
    CityProfile("Houston", "TX", 29.7604, -95.3698),
    CityProfile("Phoenix", "AZ", 33.4484, -112.0740),
)


@dataclass
class LayoutConfig:
    """Configuration for site generation."""

    cities: List[CityProfile] = field(default_factory=lambda: list(DEFAULT_CITIES))

    # Rack grid
    rack_rows: int = 2
    racks_per_row: int = 4
    total_units: int = DEFAULT_TOTAL_UNITS
    rack_width: float = DEFAULT_RACK_WIDTH
    rack_height: float = DEFAULT_RACK_HEIGHT
    rack_depth: float = DEFAULT_RACK_DEPTH
    rack_power_capacity: float = DEFAULT_RACK_POWER_CAPACITY_W

    # Fill
    utilization_range: Tuple[float, float] = (0.4, 0.6)
    utilization_target: Optional[float] = None  # Fixed fraction, overrides range
    pdu_probability: float = 0.7

    # Determinism
    seed: Optional[int] = None

    # Demo scenario on the first site
    include_demo_seeds: bool = True
    demo_removed_servers: int = 2

    def __post_init__(self):
        low, high = self.utilization_range
        if not 0.0 <= low <= high <= 1.0:
            raise ValueError(f"utilization_range must satisfy 0 <= low <= high <= 1, got {self.utilization_range}")
        if self.utilization_target is not None and not 0.0 <= self.utilization_target <= 1.0:
            raise ValueError(f"utilization_target must be in [0, 1], got {self.utilization_target}")
        if self.total_units <= 0:
            raise ValueError(f"total_units must be > 0, got {self.total_units}")


@dataclass
class GenerationResult:
    """Result of site generation."""

    sites: List[Site] = field(default_factory=list)
    validation: Dict[str, ValidationResult] = field(default_factory=dict)
    skipped_placements: int = 0
    generation_time_ms: float = 0.0

    @property
    def success(self) -> bool:
        return all(v.is_valid for v in self.validation.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "site_count": len(self.sites),
            "equipment_count": sum(len(s.equipment) for s in self.sites),
            "skipped_placements": self.skipped_placements,
            "validation": {k: v.to_dict() for k, v in self.validation.items()},
            "generation_time_ms": self.generation_time_ms,
        }


# =============================================================================
# GENERATOR
# =============================================================================

class LayoutGenerator:
    """
    Generates synthetic sites.

    Usage:
        generator = LayoutGenerator(LayoutConfig(seed=7))
        result = generator.generate()
    """

    def __init__(self, config: Optional[LayoutConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or LayoutConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self._issued_ids: Set[str] = set()
        self._skipped = 0

    def generate(self) -> GenerationResult:
        """Generate every configured site and validate the result."""
        start = time.time()
        result = GenerationResult()

        for index, city in enumerate(self.config.cities):
            site = self._generate_site(index, city)
            result.sites.append(site)

            validation = validate_site(site)
            result.validation[site.id] = validation
            if not validation.is_valid:
                logger.error(f"Generated site {site.id} failed validation: {validation.errors_count} errors")

        result.skipped_placements = self._skipped
        result.generation_time_ms = (time.time() - start) * 1000

        logger.info(
            f"Generated {len(result.sites)} sites with "
            f"{sum(len(s.equipment) for s in result.sites)} equipment items"
        )
        return result

    # -------------------------------------------------------------------------
    # Site / rack construction
    # -------------------------------------------------------------------------

    def _generate_site(self, index: int, city: CityProfile) -> Site:
        number = index + 1
        racks: List[Rack] = []
        equipment: List[Equipment] = []
        allocators: Dict[str, UnitAllocator] = {}

        count = 0
        for row in range(self.config.rack_rows):
            for col in range(self.config.racks_per_row):
                count += 1
                rack = self._create_rack(
                    rack_id=f"rack-{number}-{count}",
                    name=f"Rack {chr(65 + row)}{col + 1}",
                    x=RACK_ROW_ORIGIN_X + col * RACK_COLUMN_SPACING,
                    z=RACK_ROW_ORIGIN_Z + row * RACK_ROW_SPACING,
                )
                racks.append(rack)

                allocator = UnitAllocator(rack.total_units)
                allocators[rack.id] = allocator

                mark_removed = (
                    self.config.include_demo_seeds and index == 0 and count == 1
                )
                equipment.extend(self._fill_rack(rack, allocator, mark_removed))

        if self.config.include_demo_seeds and index == 0:
            future_rack = self._create_rack(
                rack_id=f"rack-{number}-future",
                name="Rack F1",
                x=8.0,
                z=RACK_ROW_ORIGIN_Z,
                status=FourDStatus.FUTURE,
            )
            racks.append(future_rack)
            allocators[future_rack.id] = UnitAllocator(future_rack.total_units)
            equipment.extend(self._demo_seed_equipment(racks, allocators))

        return Site(
            id=f"site-{number}",
            name=f"{city.name} Data Center",
            address=f"{1000 + index * 100} Tech Park Drive",
            city=city.name,
            state=city.state,
            coordinates=Coordinates(lat=city.lat, lng=city.lng),
            building=Building(
                id=f"building-{number}",
                name=f"Building {number}",
                dimensions=Dimensions(**BUILDING_DIMENSIONS),
            ),
            racks=racks,
            equipment=equipment,
        )

    def _create_rack(
        self,
        rack_id: str,
        name: str,
        x: float,
        z: float,
        status: FourDStatus = FourDStatus.EXISTING_RETAINED,
    ) -> Rack:
        return Rack(
            id=rack_id,
            name=name,
            position=Position3D(x=x, y=0.0, z=z),
            dimensions=Dimensions(
                width=self.config.rack_width,
                height=self.config.rack_height,
                depth=self.config.rack_depth,
            ),
            total_units=self.config.total_units,
            four_d_status=status,
            power_capacity=self.config.rack_power_capacity,
        )

    def _equipment_mix(self) -> List[Tuple[EquipmentType, int]]:
        rng = self.rng
        return [
            (EquipmentType.SERVER, rng.randint(3, 6)),
            (EquipmentType.SWITCH, rng.randint(1, 2)),
            (EquipmentType.STORAGE, 1 if rng.random() < 0.5 else 0),
            (EquipmentType.FIREWALL, 1 if rng.random() < 0.4 else 0),
            (EquipmentType.PATCH_PANEL, 1),
            (EquipmentType.UPS, 1 if rng.random() < 0.5 else 0),
        ]

    def _target_utilization(self) -> float:
        if self.config.utilization_target is not None:
            return self.config.utilization_target
        low, high = self.config.utilization_range
        return low + self.rng.random() * (high - low)

    def _fill_rack(
        self,
        rack: Rack,
        allocator: UnitAllocator,
        mark_removed: bool = False,
    ) -> List[Equipment]:
        """Place a PDU and the equipment mix bottom-up in one rack."""
        placed: List[Equipment] = []

        # PDU at the bottom
        if self.rng.random() < self.config.pdu_probability:
            pdu = find_template(EquipmentType.PDU, unit_height=1)
            if pdu is not None:
                unit = allocator.allocate(pdu.unit_height, start=1)
                if unit is not None:
                    placed.append(self._create_equipment(rack, unit, pdu))

        mix = self._equipment_mix()
        max_units = math.floor(rack.total_units * self._target_utilization())

        for equipment_type, count in mix:
            candidates = templates_for_type(equipment_type)
            if not candidates:
                continue

            for i in range(count):
                if allocator.occupied_count >= max_units:
                    break

                template = self.rng.choice(candidates)
                gap = 0
                if equipment_type in CABLE_MANAGED_TYPES and allocator.occupied_count:
                    gap = self.rng.randint(0, 1)

                unit = allocator.allocate(template.unit_height, gap=gap)
                if unit is None:
                    # Smaller types later in the mix may still fit
                    self._skipped += 1
                    logger.debug(f"No room for {template.unit_height}U {equipment_type.value} in {rack.id}")
                    break

                status = FourDStatus.EXISTING_RETAINED
                if (
                    mark_removed
                    and equipment_type == EquipmentType.SERVER
                    and i < self.config.demo_removed_servers
                ):
                    status = FourDStatus.EXISTING_REMOVED

                item = self._create_equipment(rack, unit, template)
                # Removed items keep their original install date
                item.four_d_status = status
                placed.append(item)

        logger.debug(f"Rack {rack.id}: {allocator.occupied_count}/{rack.total_units}U occupied")
        return placed

    def _demo_seed_equipment(
        self,
        racks: List[Rack],
        allocators: Dict[str, UnitAllocator],
    ) -> List[Equipment]:
        """Proposed and future items of the demo scenario."""
        seeds: List[Equipment] = []
        regular, future = racks[:-1], racks[-1]
        first = regular[0] if regular else None
        second = regular[1] if len(regular) > 1 else None

        proposed = [
            (first, 20, EquipmentType.SERVER, "Dell", 2, "PowerEdge R750", "Dell PowerEdge R750 (New)"),
            (first, 26, EquipmentType.SWITCH, "Cisco", 2, "Nexus 9336C-FX2", "Cisco Nexus 9336C-FX2 (New)"),
            (second, 15, EquipmentType.STORAGE, "NetApp", 2, "FAS8300", "NetApp FAS8300 (New)"),
        ]
        for rack, suggested, equipment_type, manufacturer, height, model, name in proposed:
            if rack is None:
                continue
            template = find_template(equipment_type, manufacturer=manufacturer, unit_height=height)
            item = self._place_seed(
                rack, allocators[rack.id], template, model, name,
                FourDStatus.PROPOSED, start=suggested,
            )
            if item is not None:
                seeds.append(item)

        future_items = [
            (EquipmentType.SERVER, "HP", 2, "ProLiant DL380 Gen10", "HP ProLiant DL380 Gen10 (Future)"),
            (EquipmentType.SWITCH, "Arista", None, "7050SX3-48YC12", "Arista 7050SX3 (Future)"),
            (EquipmentType.STORAGE, "Pure Storage", None, "FlashArray//X90", "Pure Storage FlashArray (Future)"),
        ]
        for equipment_type, manufacturer, height, model, name in future_items:
            template = find_template(equipment_type, manufacturer=manufacturer, unit_height=height)
            item = self._place_seed(
                future, allocators[future.id], template, model, name,
                FourDStatus.FUTURE, gap=1,
            )
            if item is not None:
                seeds.append(item)

        return seeds

    def _place_seed(
        self,
        rack: Rack,
        allocator: UnitAllocator,
        template: Optional[EquipmentTemplate],
        model: str,
        name: str,
        status: FourDStatus,
        start: Optional[int] = None,
        gap: int = 0,
    ) -> Optional[Equipment]:
        if template is None:
            return None
        unit = allocator.allocate(template.unit_height, start=start, gap=gap)
        if unit is None:
            self._skipped += 1
            logger.debug(f"Demo item {name} does not fit in {rack.id}")
            return None
        item = self._create_equipment(rack, unit, template, status=status, model=model)
        item.name = name
        return item

    # -------------------------------------------------------------------------
    # Equipment construction
    # -------------------------------------------------------------------------

    def _create_equipment(
        self,
        rack: Rack,
        unit: int,
        template: EquipmentTemplate,
        status: FourDStatus = FourDStatus.EXISTING_RETAINED,
        model: Optional[str] = None,
    ) -> Equipment:
        model = model or self.rng.choice(template.models)
        return Equipment(
            id=self._equipment_id(),
            name=f"{template.manufacturer} {model}",
            equipment_type=template.equipment_type,
            rack_id=rack.id,
            rack_unit=unit,
            unit_height=template.unit_height,
            position=equipment_position(rack, unit, template.unit_height),
            dimensions=equipment_dimensions(rack, template.unit_height),
            four_d_status=status,
            manufacturer=template.manufacturer,
            model=model,
            power_consumption=float(template.power),
            serial_number="SN" + self._token(12),
            asset_tag=f"AT{self.rng.randint(100000, 999999)}",
            install_date=EXISTING_INSTALL_DATE if status == FourDStatus.EXISTING_RETAINED else None,
        )

    def _token(self, length: int) -> str:
        return "".join(self.rng.choice(_ID_ALPHABET) for _ in range(length))

    def _equipment_id(self) -> str:
        while True:
            candidate = "EQ-" + self._token(9)
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate


def generate_layout(
    config: Optional[LayoutConfig] = None,
    rng: Optional[random.Random] = None,
) -> List[Site]:
    """
    Generate synthetic sites.

    Args:
        config: Generation parameters (defaults: five cities, 2x4 racks of 42U)
        rng: Random source; defaults to ``random.Random(config.seed)``

    Returns:
        Sites in city order
    """
    return LayoutGenerator(config, rng).generate().sites
