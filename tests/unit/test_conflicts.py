"""
Unit tests for planning/conflicts.py

Tests unit range conflict detection against installed items and pending
destinations.
"""

from dataclasses import replace

from rackplan.core.models import PlannedMove
from rackplan.planning.conflicts import detect_conflict, has_conflict, occupied_ranges


class TestInstalledConflicts:
    """Conflicts against installed active items."""

    def test_overlap_reports_blocker(self, small_site):
        result = detect_conflict(small_site, None, "rack-a", 1, moving_height=2)
        assert result.has_conflict
        assert result.blocking_equipment_id == "eq-a1"
        assert result.target_start == 1
        assert result.target_end == 2

    def test_partial_overlap(self, small_site):
        result = detect_conflict(small_site, None, "rack-a", 2, moving_height=1)
        assert result.has_conflict
        assert result.blocking_equipment_id == "eq-a1"

    def test_adjacent_range_is_free(self, small_site):
        result = detect_conflict(small_site, None, "rack-a", 3, moving_height=2)
        assert not result.has_conflict
        assert result.blocking_equipment_id is None
        assert result.conflicting_ids == []

    def test_removed_items_never_block(self, small_site):
        result = detect_conflict(small_site, None, "rack-a", 20, moving_height=2)
        assert not result.has_conflict

    def test_first_match_in_collection_order(self, small_site):
        result = detect_conflict(small_site, None, "rack-a", 1, moving_height=12)
        assert result.blocking_equipment_id == "eq-a1"
        assert result.conflicting_ids == ["eq-a1", "eq-a2"]

    def test_outcome_independent_of_order(self, small_site):
        """Only the reported blocker depends on collection order."""
        forward = detect_conflict(small_site.equipment, None, "rack-a", 1, moving_height=12)
        backward = detect_conflict(list(reversed(small_site.equipment)), None, "rack-a", 1, moving_height=12)

        assert forward.has_conflict and backward.has_conflict
        assert set(forward.conflicting_ids) == set(backward.conflicting_ids) == {"eq-a1", "eq-a2"}
        assert forward.blocking_equipment_id == "eq-a1"
        assert backward.blocking_equipment_id == "eq-a2"

    def test_moving_item_excluded(self, small_site):
        """An item never conflicts with its own current range."""
        result = detect_conflict(small_site, "eq-a1", "rack-a", 2)
        assert not result.has_conflict
        assert result.target_end == 3

    def test_other_racks_ignored(self, small_site):
        assert not has_conflict(small_site, None, "rack-b", 1, moving_height=4)
        assert has_conflict(small_site, None, "rack-b", 8, moving_height=1)

    def test_unknown_item_defaults_to_one_unit(self, small_site):
        result = detect_conflict(small_site, "eq-unknown", "rack-a", 3)
        assert result.target_end == 3

    def test_accepts_equipment_sequence(self, small_site):
        assert has_conflict(small_site.equipment, None, "rack-a", 10, moving_height=1)


class TestReservedDestinations:
    """Pending planned moves as reservations."""

    def _site_with_plan(self, site):
        planned = replace(
            site.get_equipment("eq-b1"),
            planned_move=PlannedMove(target_rack_id="rack-a", target_rack_unit=30),
        )
        return site.replace_equipment(planned)

    def test_ignored_by_default(self, small_site):
        site = self._site_with_plan(small_site)
        assert not has_conflict(site, None, "rack-a", 31, moving_height=1)

    def test_reservation_blocks_when_included(self, small_site):
        site = self._site_with_plan(small_site)
        result = detect_conflict(site, None, "rack-a", 31, moving_height=1, include_planned=True)
        assert result.has_conflict
        assert result.blocking_equipment_id == "eq-b1"
        assert result.reserved_by == ["eq-b1"]
        assert result.blocked_by_reservation

    def test_installed_blocker_wins_over_reservation(self, small_site):
        site = self._site_with_plan(small_site)
        result = detect_conflict(site, None, "rack-a", 1, moving_height=40, include_planned=True)
        assert result.blocking_equipment_id == "eq-a1"
        assert "eq-b1" in result.reserved_by
        assert not result.blocked_by_reservation

    def test_own_plan_is_not_a_reservation(self, small_site):
        site = self._site_with_plan(small_site)
        assert not has_conflict(site, "eq-b1", "rack-a", 30, include_planned=True)

    def test_occupied_ranges_order(self, small_site):
        site = self._site_with_plan(small_site)
        ranges = occupied_ranges(site.equipment, "rack-a", include_planned=True)
        assert ranges == [
            ("eq-a1", 1, 2, False),
            ("eq-a2", 10, 10, False),
            ("eq-b1", 30, 33, True),
        ]


class TestConflictResultSerialization:
    """Tests for ConflictResult.to_dict."""

    def test_to_dict(self, small_site):
        data = detect_conflict(small_site, None, "rack-a", 1, moving_height=2).to_dict()
        assert data["has_conflict"] is True
        assert data["blocking_equipment_id"] == "eq-a1"
        assert data["target_rack_id"] == "rack-a"
        assert data["conflicting_ids"] == ["eq-a1"]
