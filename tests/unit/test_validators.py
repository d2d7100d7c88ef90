"""
Unit tests for validators/occupancy.py
"""

from dataclasses import replace

from rackplan.core.enums import FourDStatus
from rackplan.core.models import PlannedMove
from rackplan.validators.occupancy import (
    ValidationResult,
    ValidationSeverity,
    validate_rack_occupancy,
    validate_site,
)


class TestValidateSite:
    """Occupancy and reference rules."""

    def test_clean_site(self, small_site):
        result = validate_site(small_site)
        assert result.is_valid
        assert result.errors_count == 0
        assert "unique_ids" in result.checked_rules
        assert "occupancy:rack-a" in result.checked_rules

    def test_overlap_detected(self, small_site, equipment_factory):
        rack_a = small_site.get_rack("rack-a")
        site = small_site.with_equipment(small_site.equipment + [equipment_factory("eq-x", rack_a, 2, 2)])
        result = validate_site(site)
        assert not result.is_valid
        overlaps = result.get_issues_by_category("overlap")
        assert len(overlaps) == 1
        assert overlaps[0].equipment_ids == ["eq-a1", "eq-x"]
        assert overlaps[0].issue_id == "overlap_eq-a1_eq-x"

    def test_removed_overlap_allowed(self, small_site, equipment_factory):
        rack_a = small_site.get_rack("rack-a")
        ghost = equipment_factory("eq-ghost", rack_a, 1, 2, status=FourDStatus.EXISTING_REMOVED)
        assert validate_site(small_site.with_equipment(small_site.equipment + [ghost])).is_valid

    def test_out_of_bounds(self, small_site):
        item = replace(small_site.get_equipment("eq-a1"), rack_unit=42)
        result = validate_site(small_site.replace_equipment(item))
        assert [i.issue_id for i in result.get_issues_by_category("bounds")] == ["bounds_eq-a1"]

    def test_invalid_height(self, small_site):
        item = replace(small_site.get_equipment("eq-a1"), unit_height=0)
        result = validate_site(small_site.replace_equipment(item))
        assert any(i.issue_id == "height_eq-a1" for i in result.issues)

    def test_duplicate_ids(self, small_site):
        copy = small_site.get_equipment("eq-a2")
        site = small_site.with_equipment(small_site.equipment + [replace(copy, rack_id="rack-b", rack_unit=30)])
        result = validate_site(site)
        assert result.get_issues_by_category("identity")

    def test_dangling_rack_reference(self, small_site):
        item = replace(small_site.get_equipment("eq-a2"), rack_id="rack-gone")
        result = validate_site(small_site.replace_equipment(item))
        assert not result.is_valid
        assert result.get_issues_by_category("reference")[0].rack_id == "rack-gone"

    def test_dangling_plan_is_warning(self, small_site):
        item = replace(
            small_site.get_equipment("eq-a2"),
            planned_move=PlannedMove(target_rack_id="rack-gone", target_rack_unit=1),
        )
        result = validate_site(small_site.replace_equipment(item))
        assert result.is_valid
        assert result.warnings_count == 1
        assert result.get_issues_by_category("plan")[0].severity == ValidationSeverity.WARNING

    def test_rack_scope(self, small_site, equipment_factory):
        rack_b = small_site.get_rack("rack-b")
        site = small_site.with_equipment(small_site.equipment + [equipment_factory("eq-y", rack_b, 8, 1)])
        assert validate_rack_occupancy(site, "rack-a").is_valid
        assert not validate_rack_occupancy(site, "rack-b").is_valid
        assert site_issue_racks(validate_site(site)) == {"rack-b"}


def site_issue_racks(result: ValidationResult):
    return {i.rack_id for i in result.issues}


class TestValidationResult:
    """Result bookkeeping."""

    def test_merge(self):
        first = ValidationResult()
        first.add_warning("w1", "plan", "warning")
        second = ValidationResult()
        second.add_error("e1", "overlap", "error")
        first.merge(second)
        assert not first.is_valid
        assert first.errors_count == 1
        assert first.warnings_count == 1

    def test_to_dict(self):
        result = ValidationResult()
        result.add_error("e1", "overlap", "boom", rack_id="rack-a", equipment_ids=["a", "b"])
        data = result.to_dict()
        assert data["is_valid"] is False
        assert data["issues"][0]["severity"] == "error"
        assert data["issues"][0]["equipment_ids"] == ["a", "b"]
