"""
Unit tests for planning/operations.py

Tests add / remove / status operations on equipment.
"""

from dataclasses import replace

import pytest

from rackplan.core.enums import EquipmentType, FourDStatus
from rackplan.core.models import PlannedMove
from rackplan.errors.taxonomy import ErrorCategory, ErrorCode
from rackplan.planning.operations import (
    EquipmentSpec,
    add_equipment,
    remove_equipment,
    update_equipment_status,
)


def spec(**overrides):
    values = dict(
        name="Custom Box 9000",
        equipment_type=EquipmentType.SERVER,
        rack_id="rack-a",
        rack_unit=3,
    )
    values.update(overrides)
    return EquipmentSpec(**values)


class TestAddEquipment:
    """Adding proposed items."""

    def test_custom_item_defaults(self, small_site):
        result = add_equipment(small_site, spec())
        assert result.success
        item = result.site.get_equipment(result.equipment_id)
        assert item.id.startswith("EQ-")
        assert item.unit_height == 2
        assert item.power_consumption == 500.0
        assert item.four_d_status == FourDStatus.PROPOSED
        assert item.manufacturer == "Custom"
        assert item.model == "Box 9000"
        assert item.serial_number == f"SN-NEW-{item.id}"
        assert item.asset_tag == f"AT-NEW-{item.id}"
        assert item.rack_unit == 3

    def test_position_derived(self, small_site):
        result = add_equipment(small_site, spec(rack_id="rack-b", rack_unit=1))
        item = result.site.get_equipment(result.equipment_id)
        assert item.position.y == pytest.approx(2.0 / 42)
        assert item.position.x == small_site.get_rack("rack-b").position.x

    def test_explicit_height_and_power(self, small_site):
        result = add_equipment(small_site, spec(unit_height=3, power_consumption=120.0))
        item = result.site.get_equipment(result.equipment_id)
        assert item.unit_height == 3
        assert item.power_consumption == 120.0

    def test_preset_wins(self, small_site):
        result = add_equipment(small_site, spec(name="Dell PowerEdge R840", unit_height=1, rack_unit=30))
        item = result.site.get_equipment(result.equipment_id)
        assert item.unit_height == 4
        assert item.power_consumption == 1600.0
        assert item.manufacturer == "Dell"
        assert item.model == "PowerEdge R840"

    def test_preset_zero_power_kept(self, small_site):
        result = add_equipment(small_site, spec(
            name="APC Smart-UPS SRT 3000", equipment_type=EquipmentType.UPS, rack_unit=30,
        ))
        item = result.site.get_equipment(result.equipment_id)
        assert item.power_consumption == 0.0

    def test_single_word_name(self, small_site):
        result = add_equipment(small_site, spec(name="Widget"))
        item = result.site.get_equipment(result.equipment_id)
        assert item.manufacturer == "Widget"
        assert item.model == "Widget"

    def test_explicit_id(self, small_site):
        result = add_equipment(small_site, spec(equipment_id="eq-new"))
        assert result.equipment_id == "eq-new"
        assert result.site.get_equipment("eq-new") is not None

    def test_input_not_mutated(self, small_site):
        before = len(small_site.equipment)
        add_equipment(small_site, spec())
        assert len(small_site.equipment) == before

    def test_on_removed_range(self, small_site):
        assert add_equipment(small_site, spec(rack_unit=20)).success

    def test_missing_rack(self, small_site):
        result = add_equipment(small_site, spec(rack_id="rack-gone"))
        assert not result.success
        assert result.site is small_site
        assert result.issue.code == ErrorCode.REF_RACK_NOT_FOUND
        assert result.issue.category == ErrorCategory.REFERENCE

    def test_out_of_bounds(self, small_site):
        result = add_equipment(small_site, spec(rack_unit=42))
        assert not result.success
        assert result.issue.code == ErrorCode.BND_OUT_OF_RACK

    def test_conflict(self, small_site):
        result = add_equipment(small_site, spec(rack_unit=1))
        assert not result.success
        assert result.issue.code == ErrorCode.CON_OVERLAP
        assert result.issue.actual_value == "eq-a1"
        assert result.site is small_site

    def test_reserved_destination(self, small_site):
        planned = replace(
            small_site.get_equipment("eq-a2"),
            planned_move=PlannedMove(target_rack_id="rack-b", target_rack_unit=30),
        )
        site = small_site.replace_equipment(planned)
        result = add_equipment(site, spec(rack_id="rack-b", rack_unit=29))
        assert not result.success
        assert result.issue.code == ErrorCode.CON_RESERVED

    def test_invalid_height(self, small_site):
        result = add_equipment(small_site, spec(unit_height=0))
        assert not result.success
        assert result.issue.code == ErrorCode.VAL_INVALID_HEIGHT

    def test_duplicate_id(self, small_site):
        result = add_equipment(small_site, spec(equipment_id="eq-a1", rack_unit=30))
        assert not result.success
        assert result.issue.code == ErrorCode.VAL_FAILED


class TestStatusChanges:
    """4D status side channel."""

    def test_unknown_item(self, small_site):
        result = update_equipment_status(small_site, "eq-missing", FourDStatus.PROPOSED)
        assert not result.success
        assert result.issue.code == ErrorCode.REF_EQUIPMENT_NOT_FOUND

    def test_status_clears_plan(self, small_site):
        planned = replace(
            small_site.get_equipment("eq-a2"),
            planned_move=PlannedMove(target_rack_id="rack-b", target_rack_unit=30),
        )
        site = small_site.replace_equipment(planned)
        result = update_equipment_status(site, "eq-a2", FourDStatus.FUTURE)
        item = result.site.get_equipment("eq-a2")
        assert item.four_d_status == FourDStatus.FUTURE
        assert item.planned_move is None

    def test_modified_keeps_plan(self, small_site):
        planned = replace(
            small_site.get_equipment("eq-a2"),
            planned_move=PlannedMove(target_rack_id="rack-b", target_rack_unit=30),
        )
        site = small_site.replace_equipment(planned)
        result = update_equipment_status(site, "eq-a2", FourDStatus.MODIFIED)
        assert result.site.get_equipment("eq-a2").planned_move is not None

    def test_reactivation_refused_when_taken(self, small_site):
        site = add_equipment(small_site, spec(rack_unit=20, equipment_id="eq-new")).site
        result = update_equipment_status(site, "eq-removed", FourDStatus.EXISTING_RETAINED)
        assert not result.success
        assert result.issue.code == ErrorCode.CON_OVERLAP
        assert result.issue.actual_value == "eq-new"

    def test_reactivation_when_free(self, small_site):
        result = update_equipment_status(small_site, "eq-removed", FourDStatus.EXISTING_RETAINED)
        assert result.success
        assert result.site.get_equipment("eq-removed").is_active

    def test_remove_keeps_record(self, small_site):
        result = remove_equipment(small_site, "eq-a1")
        assert result.success
        item = result.site.get_equipment("eq-a1")
        assert item.four_d_status == FourDStatus.EXISTING_REMOVED
        assert len(result.site.equipment) == len(small_site.equipment)

    def test_result_to_dict(self, small_site):
        data = remove_equipment(small_site, "eq-missing").to_dict()
        assert data["success"] is False
        assert data["issue"]["code"] == ErrorCode.REF_EQUIPMENT_NOT_FOUND.value
