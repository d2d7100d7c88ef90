"""
Unit tests for inventory/summary.py
"""

from dataclasses import replace

import pytest

from rackplan.core.enums import FourDStatus
from rackplan.core.models import PlannedMove
from rackplan.inventory.summary import find_free_slots, rack_usage, site_summary, visible_equipment


class TestRackUsage:
    """Per-rack utilization."""

    def test_active_items_only(self, small_site):
        usage = rack_usage(small_site, "rack-a")
        assert usage.used_units == 3
        assert usage.equipment_count == 2
        assert usage.free_units == 39
        assert usage.power_draw == pytest.approx(850.0)
        assert usage.utilization == pytest.approx(3 / 42)

    def test_missing_rack(self, small_site):
        assert rack_usage(small_site, "rack-gone") is None

    def test_to_dict(self, small_site):
        data = rack_usage(small_site, "rack-b").to_dict()
        assert data["used_units"] == 4
        assert data["power_utilization"] == pytest.approx(0.16)


class TestSiteSummary:
    """Site-wide counts."""

    def test_counts(self, small_site):
        summary = site_summary(small_site)
        assert summary.rack_count == 2
        assert summary.equipment_count == 4
        assert summary.by_status["existing-retained"] == 2
        assert summary.by_status["existing-removed"] == 1
        assert summary.by_status["proposed"] == 1
        assert summary.by_status["future"] == 0
        assert summary.by_type["server"] == 2
        assert summary.by_type["router"] == 0

    def test_power_excludes_removed(self, small_site):
        assert site_summary(small_site).total_power == pytest.approx(500.0 + 350.0 + 1600.0)

    def test_pending_moves(self, small_site):
        planned = replace(
            small_site.get_equipment("eq-a2"),
            planned_move=PlannedMove(target_rack_id="rack-b", target_rack_unit=30),
        )
        summary = site_summary(small_site.replace_equipment(planned))
        assert summary.pending_moves == 1

    def test_generated_site_summary(self, generated_site):
        summary = site_summary(generated_site)
        assert len(summary.racks) == len(generated_site.racks)
        assert sum(summary.by_status.values()) == len(generated_site.equipment)
        assert all(r.used_units <= r.total_units for r in summary.racks)


class TestVisibleEquipment:
    """Layer filtering."""

    def test_hidden_status(self, small_site):
        items = visible_equipment(small_site, {FourDStatus.EXISTING_REMOVED: False})
        assert [e.id for e in items] == ["eq-a1", "eq-a2", "eq-b1"]

    def test_string_keys(self, small_site):
        items = visible_equipment(small_site, {"proposed": False, "existing-retained": False})
        assert [e.id for e in items] == ["eq-removed"]

    def test_empty_map_shows_all(self, small_site):
        assert len(visible_equipment(small_site, {})) == 4


class TestFreeSlots:
    """Free start units."""

    def test_two_unit_slots(self, small_site):
        slots = find_free_slots(small_site, "rack-a", 2)
        assert 1 not in slots
        assert 2 not in slots
        assert 3 in slots
        assert 9 not in slots
        assert 10 not in slots
        assert 11 in slots
        assert 20 in slots
        assert slots[-1] == 41

    def test_reservations_respected(self, small_site):
        planned = replace(
            small_site.get_equipment("eq-a2"),
            planned_move=PlannedMove(target_rack_id="rack-b", target_rack_unit=30),
        )
        site = small_site.replace_equipment(planned)
        assert 30 not in find_free_slots(site, "rack-b", 1)
        assert 30 in find_free_slots(site, "rack-b", 1, include_planned=False)

    def test_invalid_requests(self, small_site):
        assert find_free_slots(small_site, "rack-gone", 1) == []
        assert find_free_slots(small_site, "rack-a", 0) == []
        assert find_free_slots(small_site, "rack-a", 43) == []
