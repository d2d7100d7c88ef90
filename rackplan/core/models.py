"""
rackplan Core Models

Site, rack and equipment records shared by every layer.

Records are plain dataclasses. Core operations never mutate a record they
receive; they build new ones with ``dataclasses.replace`` so the caller
decides when to swap state.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional
import logging

from .enums import EquipmentType, FourDStatus

logger = logging.getLogger(__name__)


# =============================================================================
# VALUE TYPES
# =============================================================================

@dataclass
class Position3D:
    """Point in scene space. ``y`` is the vertical axis."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Position3D":
        return cls(
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            z=float(data.get("z", 0.0)),
        )


@dataclass
class Dimensions:
    """Bounding box size."""
    width: float
    height: float
    depth: float

    def to_dict(self) -> Dict[str, float]:
        return {"width": self.width, "height": self.height, "depth": self.depth}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dimensions":
        return cls(
            width=float(data["width"]),
            height=float(data["height"]),
            depth=float(data["depth"]),
        )


@dataclass
class PlannedMove:
    """Uncommitted relocation target for an equipment item."""
    target_rack_id: str
    target_rack_unit: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targetRackId": self.target_rack_id,
            "targetRackUnit": self.target_rack_unit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannedMove":
        return cls(
            target_rack_id=data["targetRackId"],
            target_rack_unit=int(data["targetRackUnit"]),
        )


@dataclass
class Coordinates:
    """Geographic coordinates of a site."""
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Coordinates":
        return cls(lat=float(data["lat"]), lng=float(data["lng"]))


# =============================================================================
# RACK
# =============================================================================

@dataclass
class Rack:
    """
    Rack with a fixed number of addressable units.

    ``position.y`` is the rack base; units are counted upward from 1.
    """
    id: str
    name: str
    position: Position3D
    dimensions: Dimensions
    total_units: int = 42
    four_d_status: FourDStatus = FourDStatus.EXISTING_RETAINED
    power_capacity: float = 10000.0

    def __post_init__(self):
        if self.total_units <= 0:
            raise ValueError(f"Rack {self.id} must have total_units > 0, got {self.total_units}")

    @property
    def unit_height(self) -> float:
        """Height of a single rack unit in scene units."""
        return self.dimensions.height / self.total_units

    @property
    def base_y(self) -> float:
        return self.position.y

    def contains_range(self, start: int, height: int) -> bool:
        """Check that ``[start, start+height-1]`` lies within the rack."""
        return height >= 1 and start >= 1 and start + height - 1 <= self.total_units

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position.to_dict(),
            "dimensions": self.dimensions.to_dict(),
            "totalUnits": self.total_units,
            "fourDStatus": self.four_d_status.value,
            "powerCapacity": self.power_capacity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rack":
        return cls(
            id=data["id"],
            name=data["name"],
            position=Position3D.from_dict(data["position"]),
            dimensions=Dimensions.from_dict(data["dimensions"]),
            total_units=int(data.get("totalUnits", 42)),
            four_d_status=FourDStatus(data.get("fourDStatus", FourDStatus.EXISTING_RETAINED.value)),
            power_capacity=float(data.get("powerCapacity", 10000.0)),
        )


# =============================================================================
# EQUIPMENT
# =============================================================================

@dataclass
class Equipment:
    """
    Rack-mounted equipment item.

    ``position`` is derived from rack, unit and height and can always be
    recomputed. While ``planned_move`` is set the item stays at its origin;
    only the design change committer relocates it.
    """
    id: str
    name: str
    equipment_type: EquipmentType
    rack_id: str
    rack_unit: int
    unit_height: int
    position: Position3D
    dimensions: Dimensions
    four_d_status: FourDStatus = FourDStatus.EXISTING_RETAINED

    manufacturer: str = ""
    model: str = ""
    power_consumption: float = 0.0
    serial_number: str = ""
    asset_tag: str = ""
    customer: Optional[str] = None
    install_date: Optional[str] = None
    decommission_date: Optional[str] = None
    notes: Optional[str] = None

    planned_move: Optional[PlannedMove] = None
    previous_position: Optional[Position3D] = None

    @property
    def unit_end(self) -> int:
        """Last occupied unit (inclusive)."""
        return self.rack_unit + self.unit_height - 1

    @property
    def is_active(self) -> bool:
        """Active items take part in occupancy and conflict checks."""
        return self.four_d_status != FourDStatus.EXISTING_REMOVED

    @property
    def has_planned_move(self) -> bool:
        return self.planned_move is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.equipment_type.value,
            "manufacturer": self.manufacturer,
            "model": self.model,
            "rackId": self.rack_id,
            "rackUnit": self.rack_unit,
            "unitHeight": self.unit_height,
            "position": self.position.to_dict(),
            "dimensions": self.dimensions.to_dict(),
            "fourDStatus": self.four_d_status.value,
            "powerConsumption": self.power_consumption,
            "serialNumber": self.serial_number,
            "assetTag": self.asset_tag,
        }
        for key, value in (
            ("customer", self.customer),
            ("installDate", self.install_date),
            ("decommissionDate", self.decommission_date),
            ("notes", self.notes),
        ):
            if value is not None:
                data[key] = value
        if self.planned_move is not None:
            data["plannedMove"] = self.planned_move.to_dict()
        if self.previous_position is not None:
            data["previousPosition"] = self.previous_position.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Equipment":
        planned = data.get("plannedMove")
        previous = data.get("previousPosition")
        return cls(
            id=data["id"],
            name=data["name"],
            equipment_type=EquipmentType(data["type"]),
            rack_id=data["rackId"],
            rack_unit=int(data["rackUnit"]),
            unit_height=int(data["unitHeight"]),
            position=Position3D.from_dict(data["position"]),
            dimensions=Dimensions.from_dict(data["dimensions"]),
            four_d_status=FourDStatus(data.get("fourDStatus", FourDStatus.EXISTING_RETAINED.value)),
            manufacturer=data.get("manufacturer", ""),
            model=data.get("model", ""),
            power_consumption=float(data.get("powerConsumption", 0.0)),
            serial_number=data.get("serialNumber", ""),
            asset_tag=data.get("assetTag", ""),
            customer=data.get("customer"),
            install_date=data.get("installDate"),
            decommission_date=data.get("decommissionDate"),
            notes=data.get("notes"),
            planned_move=PlannedMove.from_dict(planned) if planned else None,
            previous_position=Position3D.from_dict(previous) if previous else None,
        )


# =============================================================================
# BUILDING & SITE
# =============================================================================

@dataclass
class Building:
    """Building shell around a site's racks."""
    id: str
    name: str
    position: Position3D = field(default_factory=Position3D)
    dimensions: Dimensions = field(default_factory=lambda: Dimensions(20.0, 4.0, 15.0))
    visible: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "visible": self.visible,
            "position": self.position.to_dict(),
            "dimensions": self.dimensions.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Building":
        return cls(
            id=data["id"],
            name=data["name"],
            visible=bool(data.get("visible", True)),
            position=Position3D.from_dict(data.get("position", {})),
            dimensions=Dimensions.from_dict(data["dimensions"]),
        )


@dataclass
class Site:
    """
    Facility with one building, its racks and its equipment.

    Rack ids and equipment ids are unique within a site; every equipment
    item references a rack of the same site.
    """
    id: str
    name: str
    building: Building
    address: str = ""
    city: str = ""
    state: str = ""
    coordinates: Optional[Coordinates] = None
    racks: List[Rack] = field(default_factory=list)
    equipment: List[Equipment] = field(default_factory=list)

    def get_rack(self, rack_id: str) -> Optional[Rack]:
        """Find rack by ID."""
        for rack in self.racks:
            if rack.id == rack_id:
                return rack
        return None

    def get_equipment(self, equipment_id: str) -> Optional[Equipment]:
        """Find equipment by ID."""
        for item in self.equipment:
            if item.id == equipment_id:
                return item
        return None

    def equipment_in_rack(self, rack_id: str, active_only: bool = False) -> List[Equipment]:
        """Equipment assigned to a rack, in collection order."""
        return [
            e for e in self.equipment
            if e.rack_id == rack_id and (e.is_active or not active_only)
        ]

    def planned_equipment(self) -> Iterator[Equipment]:
        return (e for e in self.equipment if e.planned_move is not None)

    def with_equipment(self, equipment: List[Equipment]) -> "Site":
        """Copy of this site with a new equipment collection."""
        return replace(self, equipment=list(equipment))

    def replace_equipment(self, updated: Equipment) -> "Site":
        """Copy of this site with one item swapped in place (order preserved)."""
        return self.with_equipment([
            updated if e.id == updated.id else e for e in self.equipment
        ])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
            "building": self.building.to_dict(),
            "racks": [r.to_dict() for r in self.racks],
            "equipment": [e.to_dict() for e in self.equipment],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Site":
        coords = data.get("coordinates")
        return cls(
            id=data["id"],
            name=data["name"],
            address=data.get("address", ""),
            city=data.get("city", ""),
            state=data.get("state", ""),
            coordinates=Coordinates.from_dict(coords) if coords else None,
            building=Building.from_dict(data["building"]),
            racks=[Rack.from_dict(r) for r in data.get("racks", [])],
            equipment=[Equipment.from_dict(e) for e in data.get("equipment", [])],
        )
