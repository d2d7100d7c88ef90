"""
Unit tests for session/session.py

Tests the planning session: site selection, persistence and the
operations routed through it.
"""

import json
import random

import pytest

from rackplan.core.constants import SNAPSHOT_VERSION
from rackplan.core.enums import ColorMode, EquipmentType, FourDStatus
from rackplan.layout.generator import DEFAULT_CITIES, LayoutConfig
from rackplan.planning.operations import EquipmentSpec
from rackplan.session.session import PlanningSession
from rackplan.session.store import MemoryBlobStore, SessionSnapshot


@pytest.fixture
def store():
    return MemoryBlobStore()


@pytest.fixture
def session(store, small_site):
    session = PlanningSession(store=store)
    session.sites = [small_site]
    session.select_site("site-t")
    return session


class TestSiteLoading:
    """Generation and selection."""

    def test_load_generates_once(self, store):
        session = PlanningSession(store=store, layout_config=LayoutConfig(cities=[DEFAULT_CITIES[0]], seed=3))
        sites = session.load_sites()
        assert [s.id for s in sites] == ["site-1"]
        assert session.load_sites() is sites
        assert store.get() is not None

    def test_injected_rng(self):
        config = LayoutConfig(cities=[DEFAULT_CITIES[1]])
        first = PlanningSession(layout_config=config, rng=random.Random(9)).load_sites()
        second = PlanningSession(layout_config=config, rng=random.Random(9)).load_sites()
        assert first[0].to_dict() == second[0].to_dict()

    def test_select_unknown_site(self, session):
        assert session.select_site("site-none") is None
        assert session.current_site is None
        assert session.begin_move("eq-a1") is None

    def test_ensure_site_keeps_planner(self, session):
        planner = session.planner
        session.ensure_site("site-t")
        assert session.planner is planner

    def test_select_site_resets_planning(self, session):
        session.begin_move("eq-a1")
        session.select_site("site-t")
        assert not session.planner.is_planning
        assert session.selected_equipment_id is None


class TestPreferences:
    """Viewer preferences are persisted."""

    def test_toggle_layer(self, session, store):
        assert session.toggle_layer("future") is False
        saved = SessionSnapshot.from_json(store.get())
        assert saved.layer_visibility[FourDStatus.FUTURE] is False
        assert session.toggle_layer(FourDStatus.FUTURE) is True

    def test_color_mode(self, session, store):
        session.set_color_mode("powerConsumption")
        assert session.color_mode == ColorMode.POWER_CONSUMPTION
        assert SessionSnapshot.from_json(store.get()).color_mode == ColorMode.POWER_CONSUMPTION

    def test_building_toggle(self, session):
        assert session.toggle_building() is False
        assert session.toggle_building() is True

    def test_invalid_color_mode(self, session):
        with pytest.raises(ValueError):
            session.set_color_mode("rainbow")


class TestRestore:
    """Loading the persisted snapshot."""

    def test_round_trip(self, session, store):
        session.toggle_layer("proposed")
        restored = PlanningSession(store=store)
        assert restored.restore()
        assert [s.id for s in restored.sites] == ["site-t"]
        assert restored.layer_visibility[FourDStatus.PROPOSED] is False
        assert restored.current_site is None

    def test_nothing_stored(self, store):
        assert not PlanningSession(store=store).restore()

    def test_unreadable_snapshot_ignored(self, store):
        store.put("{garbage")
        session = PlanningSession(store=store)
        assert not session.restore()
        assert session.sites == []

    def test_malformed_layers_ignored(self, store, small_site):
        data = SessionSnapshot(sites=[small_site]).to_dict()
        data["layerVisibility"] = ["future"]
        store.put(json.dumps(data))

        session = PlanningSession(store=store)
        assert not session.restore()
        assert session.sites == []

    def test_stale_snapshot_regenerates(self, store, small_site):
        stale = SessionSnapshot(sites=[small_site], color_mode=ColorMode.CUSTOMER).to_dict()
        stale["version"] = SNAPSHOT_VERSION - 1
        store.put(json.dumps(stale))

        session = PlanningSession(store=store, layout_config=LayoutConfig(cities=[DEFAULT_CITIES[0]], seed=1))
        assert session.restore()
        assert session.sites == []
        assert session.color_mode == ColorMode.CUSTOMER
        assert [s.id for s in session.load_sites()] == ["site-1"]

    def test_no_store(self):
        session = PlanningSession()
        assert not session.restore()
        session.save()


class TestMoveWorkflow:
    """Planning through the session."""

    def test_commit_move_updates_site_list(self, session):
        session.begin_move("eq-a2")
        session.update_move_destination("rack-b", 20)
        assert session.commit_move()

        assert session.sites[0] is session.current_site
        assert session.sites[0].get_equipment("eq-a2").planned_move is not None
        assert session.selected_equipment_id == "eq-a2"

    def test_failed_commit_leaves_site(self, session, small_site):
        session.begin_move("eq-a2")
        session.update_move_destination("rack-a", 1)
        assert not session.commit_move()
        assert session.sites[0] is small_site

    def test_world_destination(self, session):
        session.begin_move("eq-a1")
        preview = session.update_move_destination_from_world("rack-b", 100.0)
        assert preview.target_rack_unit == 41
        assert session.move_preview is preview

    def test_apply_design_changes(self, session):
        session.begin_move("eq-a2")
        session.update_move_destination("rack-b", 20)
        session.commit_move()

        report = session.apply_design_changes()
        assert report.applied_ids == ["eq-a2"]
        assert session.current_site.get_equipment("eq-a2").rack_id == "rack-b"
        assert session.last_report is report
        assert session.transactions.get_history()[-1] is report.transaction

    def test_apply_cancels_open_plan(self, session):
        session.begin_move("eq-a1")
        session.apply_design_changes()
        assert not session.planner.is_planning

    def test_status_change(self, session):
        result = session.set_equipment_status("eq-a1", "modified")
        assert result.success
        assert session.planner.active_equipment_id == "eq-a1"
        assert session.sites[0].get_equipment("eq-a1").four_d_status == FourDStatus.MODIFIED


class TestEquipmentOperations:
    """Add / remove through the session."""

    def test_add(self, session, store):
        result = session.add_equipment(EquipmentSpec(
            name="Cisco Catalyst 9300",
            equipment_type=EquipmentType.SWITCH,
            rack_id="rack-b",
            rack_unit=30,
        ))
        assert result.success
        assert session.current_site.get_equipment(result.equipment_id).unit_height == 1
        saved = SessionSnapshot.from_json(store.get())
        assert saved.sites[0].get_equipment(result.equipment_id) is not None

    def test_refused_add_keeps_site(self, session, small_site):
        result = session.add_equipment(EquipmentSpec(
            name="Box", equipment_type=EquipmentType.SERVER, rack_id="rack-a", rack_unit=1,
        ))
        assert not result.success
        assert session.current_site is small_site

    def test_remove_cancels_planning(self, session):
        session.begin_move("eq-a1")
        result = session.remove_equipment("eq-a1")
        assert result.success
        assert not session.planner.is_planning
        assert session.current_site.get_equipment("eq-a1").four_d_status == FourDStatus.EXISTING_REMOVED

    def test_selected_equipment(self, session):
        session.select_equipment("eq-b1")
        assert session.selected_equipment().id == "eq-b1"
        session.select_equipment(None)
        assert session.selected_equipment() is None
