"""
rackplan Test Configuration and Fixtures

A small hand-built site with known occupancy, plus factories for racks and
equipment placed through the geometry helpers.
"""

import pytest

from rackplan.core.enums import EquipmentType, FourDStatus
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
from rackplan.layout.generator import DEFAULT_CITIES, LayoutConfig, generate_layout


def build_rack(rack_id: str, x: float = 0.0, y: float = 0.0, total_units: int = 42,
               height: float = 2.0) -> Rack:
    return Rack(
        id=rack_id,
        name=f"Rack {rack_id}",
        position=Position3D(x=x, y=y, z=0.0),
        dimensions=Dimensions(width=0.6, height=height, depth=1.0),
        total_units=total_units,
    )


def build_equipment(equipment_id: str, rack: Rack, unit: int, height: int,
                    status: FourDStatus = FourDStatus.EXISTING_RETAINED,
                    equipment_type: EquipmentType = EquipmentType.SERVER,
                    power: float = 500.0) -> Equipment:
    return Equipment(
        id=equipment_id,
        name=f"Item {equipment_id}",
        equipment_type=equipment_type,
        rack_id=rack.id,
        rack_unit=unit,
        unit_height=height,
        position=equipment_position(rack, unit, height),
        dimensions=equipment_dimensions(rack, height),
        four_d_status=status,
        manufacturer="Acme",
        model="X1",
        power_consumption=power,
    )


@pytest.fixture
def rack_factory():
    """Build a rack (42U, 2.0 tall by default)."""
    return build_rack


@pytest.fixture
def equipment_factory():
    """Build an item positioned in a rack."""
    return build_equipment


@pytest.fixture
def small_site():
    """
    Two 42U racks, 2.0 tall, bases at y=0.

    rack-a: eq-a1 U1-U2, eq-a2 U10, eq-removed U20-U21 (existing-removed)
    rack-b: eq-b1 U5-U8 (proposed)
    """
    rack_a = build_rack("rack-a", x=-2.0)
    rack_b = build_rack("rack-b", x=2.0)
    return Site(
        id="site-t",
        name="Test Data Center",
        building=Building(id="building-t", name="Building T"),
        address="1 Test Way",
        city="Testville",
        state="TS",
        coordinates=Coordinates(lat=1.0, lng=2.0),
        racks=[rack_a, rack_b],
        equipment=[
            build_equipment("eq-a1", rack_a, 1, 2),
            build_equipment("eq-a2", rack_a, 10, 1, equipment_type=EquipmentType.SWITCH, power=350.0),
            build_equipment("eq-removed", rack_a, 20, 2, status=FourDStatus.EXISTING_REMOVED),
            build_equipment("eq-b1", rack_b, 5, 4, status=FourDStatus.PROPOSED, equipment_type=EquipmentType.STORAGE,
                            power=1600.0),
        ],
    )


@pytest.fixture
def generated_site():
    """First site of a seeded layout (demo scenario included)."""
    return generate_layout(LayoutConfig(cities=[DEFAULT_CITIES[0]], seed=42))[0]
