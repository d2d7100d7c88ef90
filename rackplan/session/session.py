"""
session/session.py - Planning session state

One explicit state object for an interactive planning session: the loaded
sites, the current site with its move planner, and the viewer preferences
that get persisted alongside the sites.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Union
import logging
import random

from rackplan.core.constants import STORE_NAME
from rackplan.core.enums import ColorMode, FourDStatus
from rackplan.core.models import Equipment, Site
from rackplan.layout.generator import LayoutConfig, generate_layout
from rackplan.planning.committer import CommitReport, apply_changes_with_report
from rackplan.planning.operations import (
    EquipmentSpec,
    OperationResult,
    add_equipment,
    remove_equipment,
)
from rackplan.planning.planner import MovePlanner
from rackplan.planning.preview import MovePreview
from rackplan.transactions.manager import TransactionManager

from .store import BlobStore, SessionSnapshot, SnapshotError, default_layer_visibility

__all__ = ["PlanningSession"]

logger = logging.getLogger(__name__)


class PlanningSession:
    """
    Session-local planning state.

    Every change to the current site goes through the session so that the
    site list, the planner and the persisted snapshot stay in step.
    """

    def __init__(
        self,
        store: Optional[BlobStore] = None,
        layout_config: Optional[LayoutConfig] = None,
        rng: Optional[random.Random] = None,
        store_key: str = STORE_NAME,
        autosave: bool = True,
    ):
        self.store = store
        self.store_key = store_key
        self.autosave = autosave and store is not None
        self.layout_config = layout_config
        self._rng = rng

        self.sites: List[Site] = []
        self.planner: Optional[MovePlanner] = None
        self.layer_visibility: Dict[FourDStatus, bool] = default_layer_visibility()
        self.color_mode: ColorMode = ColorMode.FOUR_D_STATUS
        self.building_visible: bool = True

        self.transactions = TransactionManager()
        self.last_report: Optional[CommitReport] = None

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def current_site(self) -> Optional[Site]:
        return self.planner.site if self.planner else None

    @property
    def selected_equipment_id(self) -> Optional[str]:
        return self.planner.selected_equipment_id if self.planner else None

    @property
    def move_preview(self) -> Optional[MovePreview]:
        return self.planner.preview if self.planner else None

    def get_site(self, site_id: str) -> Optional[Site]:
        for site in self.sites:
            if site.id == site_id:
                return site
        return None

    def selected_equipment(self) -> Optional[Equipment]:
        site = self.current_site
        if site is None or self.selected_equipment_id is None:
            return None
        return site.get_equipment(self.selected_equipment_id)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            sites=list(self.sites),
            layer_visibility=dict(self.layer_visibility),
            color_mode=self.color_mode,
            building_visible=self.building_visible,
        )

    def restore(self) -> bool:
        """
        Load the persisted snapshot, if any.

        A stale snapshot restores preferences only; an unreadable one is
        ignored. Current site and selection are never restored.
        """
        if self.store is None:
            return False

        try:
            snapshot = self.store.load_snapshot(self.store_key)
        except SnapshotError as e:
            logger.warning(f"Ignoring unreadable snapshot '{self.store_key}': {e}")
            return False

        if snapshot is None:
            return False

        self.sites = list(snapshot.sites)
        self.layer_visibility = dict(snapshot.layer_visibility)
        self.color_mode = snapshot.color_mode
        self.building_visible = snapshot.building_visible
        self.planner = None

        logger.info(f"Restored session with {len(self.sites)} sites")
        return True

    def save(self) -> None:
        if self.store is None:
            return
        self.store.save_snapshot(self.snapshot(), self.store_key)

    def _changed(self) -> None:
        if self.autosave:
            self.save()

    # -------------------------------------------------------------------------
    # Site selection and preferences
    # -------------------------------------------------------------------------

    def load_sites(self) -> List[Site]:
        """Generate sites unless some are already loaded."""
        if not self.sites:
            self.sites = generate_layout(self.layout_config, self._rng)
            logger.info(f"Loaded {len(self.sites)} generated sites")
            self._changed()
        return self.sites

    def select_site(self, site_id: str) -> Optional[Site]:
        """Make a site current; clears selection and any open plan."""
        site = self.get_site(site_id)
        self.planner = MovePlanner(site) if site is not None else None
        return site

    def ensure_site(self, site_id: str) -> Optional[Site]:
        """Select ``site_id`` unless it is already current."""
        current = self.current_site
        if current is not None and current.id == site_id:
            return current
        return self.select_site(site_id)

    def refresh_site(self) -> Optional[Site]:
        site = self.current_site
        return self.select_site(site.id) if site is not None else None

    def select_equipment(self, equipment_id: Optional[str]) -> None:
        if self.planner is not None:
            self.planner.select_equipment(equipment_id)

    def toggle_layer(self, status: Union[FourDStatus, str]) -> bool:
        status = FourDStatus(status)
        self.layer_visibility[status] = not self.layer_visibility.get(status, True)
        self._changed()
        return self.layer_visibility[status]

    def set_color_mode(self, mode: Union[ColorMode, str]) -> None:
        self.color_mode = ColorMode(mode)
        self._changed()

    def toggle_building(self) -> bool:
        self.building_visible = not self.building_visible
        self._changed()
        return self.building_visible

    # -------------------------------------------------------------------------
    # Current-site changes
    # -------------------------------------------------------------------------

    def _store_site(self, site: Site) -> None:
        self.sites = [site if s.id == site.id else s for s in self.sites]
        if self.planner is not None and self.planner.site is not site:
            self.planner.set_site(site)
        self._changed()

    def _sync_planner(self, before: Site) -> None:
        if self.planner.site is not before:
            self._store_site(self.planner.site)

    def begin_move(self, equipment_id: str) -> Optional[MovePreview]:
        if self.planner is None:
            return None
        self.planner.select_equipment(equipment_id)
        return self.planner.begin_plan(equipment_id)

    def update_move_destination(self, rack_id: str, unit: int) -> Optional[MovePreview]:
        if self.planner is None:
            return None
        return self.planner.update_destination(rack_id, unit)

    def update_move_destination_from_world(self, rack_id: str, world_y: float) -> Optional[MovePreview]:
        if self.planner is None:
            return None
        return self.planner.update_destination_from_world(rack_id, world_y)

    def commit_move(self) -> bool:
        if self.planner is None:
            return False
        before = self.planner.site
        committed = self.planner.commit()
        self._sync_planner(before)
        return committed

    def cancel_move(self) -> None:
        if self.planner is not None:
            self.planner.cancel()

    def set_equipment_status(self, equipment_id: str, status: Union[FourDStatus, str]) -> Optional[OperationResult]:
        if self.planner is None:
            return None
        before = self.planner.site
        result = self.planner.set_status(equipment_id, FourDStatus(status))
        self._sync_planner(before)
        return result

    def add_equipment(self, spec: EquipmentSpec) -> Optional[OperationResult]:
        site = self.current_site
        if site is None:
            return None
        result = add_equipment(site, spec)
        if result.success:
            self._store_site(result.site)
        return result

    def remove_equipment(self, equipment_id: str) -> Optional[OperationResult]:
        site = self.current_site
        if site is None:
            return None
        result = remove_equipment(site, equipment_id)
        if result.success:
            if self.planner.active_equipment_id == equipment_id:
                self.planner.cancel()
            self._store_site(result.site)
        return result

    def apply_design_changes(self) -> Optional[CommitReport]:
        """Commit every planned move of the current site."""
        site = self.current_site
        if site is None:
            return None
        self.planner.cancel()
        report = apply_changes_with_report(site, self.transactions)
        self.last_report = report
        if report.site is not site:
            self._store_site(report.site)
        return report
