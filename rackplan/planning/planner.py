"""
planning/planner.py - Interactive move planning

Session-local state machine for relocating one item at a time:

    IDLE --begin_plan / status=modified--> PLANNING
    PLANNING --update_destination--> PLANNING   (preview recomputed)
    PLANNING --commit (valid preview)--> PLANNED
    PLANNING --cancel / selection change--> IDLE or PLANNED
    PLANNED --status other than modified--> IDLE (plan dropped)

Only one item is in PLANNING at a time. PLANNED is a property of the item
(its ``planned_move``), so any number of items can be PLANNED.
"""

from __future__ import annotations
from enum import Enum
from typing import Optional, Tuple
import logging

from rackplan.core.enums import FourDStatus
from rackplan.core.models import Site
from rackplan.errors.taxonomy import (
    ErrorCode,
    PlanningIssue,
    create_bounds_issue,
    create_conflict_issue,
    create_not_found_issue,
    create_rack_missing_issue,
    create_state_issue,
)
from rackplan.geometry.unit_mapper import max_start_unit, world_position_to_unit

from .operations import OperationResult, update_equipment_status
from .preview import MovePreview, build_preview, commit_plan

__all__ = ["MovePhase", "MovePlanner"]

logger = logging.getLogger(__name__)


class MovePhase(Enum):
    """Planning phase of an equipment item."""
    IDLE = "idle"
    PLANNING = "planning"
    PLANNED = "planned"


class MovePlanner:
    """
    Plan / preview / commit state machine over one site.

    All changes are copy-on-write: ``self.site`` is replaced, never mutated.
    Refused actions return ``False``/``None`` and leave the reason in
    ``last_issue``.
    """

    def __init__(self, site: Site):
        self.site = site
        self.selected_equipment_id: Optional[str] = None
        self.last_issue: Optional[PlanningIssue] = None

        self._active_id: Optional[str] = None
        self._destination: Optional[Tuple[str, int]] = None
        self._preview: Optional[MovePreview] = None

    # -------------------------------------------------------------------------
    # State inspection
    # -------------------------------------------------------------------------

    @property
    def active_equipment_id(self) -> Optional[str]:
        return self._active_id

    @property
    def is_planning(self) -> bool:
        return self._active_id is not None

    @property
    def destination(self) -> Optional[Tuple[str, int]]:
        return self._destination

    @property
    def preview(self) -> Optional[MovePreview]:
        """Live preview of the working destination (None outside PLANNING)."""
        return self._preview

    def phase_of(self, equipment_id: str) -> MovePhase:
        if equipment_id == self._active_id:
            return MovePhase.PLANNING
        item = self.site.get_equipment(equipment_id)
        if item is not None and item.planned_move is not None:
            return MovePhase.PLANNED
        return MovePhase.IDLE

    def set_site(self, site: Site) -> None:
        """
        Swap in a new version of the site.

        An open plan survives if its item still exists; the preview is
        recomputed against the new site.
        """
        self.site = site
        if self._active_id is None:
            return
        if site.get_equipment(self._active_id) is None:
            self._reset()
        elif self._destination is not None:
            self._preview = self._evaluate(*self._destination)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def begin_plan(self, equipment_id: str) -> Optional[MovePreview]:
        """
        Open PLANNING for an item.

        The working destination starts at the item's pending plan, or at its
        current location when it has none.
        """
        item = self.site.get_equipment(equipment_id)
        if item is None:
            self._fail(create_not_found_issue(
                message=f"Equipment {equipment_id} not found",
                source="planner.begin_plan",
                equipment_id=equipment_id,
            ))
            return None

        if not item.is_active:
            self._fail(create_state_issue(
                message=f"{item.name} is marked for removal and cannot be moved",
                source="planner.begin_plan",
                code=ErrorCode.STA_REMOVED_ITEM,
                equipment_id=equipment_id,
            ))
            return None

        if self._active_id is not None and self._active_id != equipment_id:
            self.cancel()

        self.last_issue = None
        self._active_id = equipment_id
        if item.planned_move is not None:
            self._destination = (item.planned_move.target_rack_id, item.planned_move.target_rack_unit)
        else:
            self._destination = (item.rack_id, item.rack_unit)
        self._preview = self._evaluate(*self._destination)

        logger.debug(f"Planning {equipment_id} from {self._destination[0]} U{self._destination[1]}")
        return self._preview

    def update_destination(self, rack_id: str, unit: int) -> Optional[MovePreview]:
        """
        Set the working destination and recompute the preview.

        Idempotent; the last call wins. Returns None outside PLANNING.
        """
        if self._active_id is None:
            self._fail(create_state_issue(
                message="No move is being planned",
                source="planner.update_destination",
            ))
            return None

        self._destination = (rack_id, int(unit))
        self._preview = self._evaluate(rack_id, int(unit))
        return self._preview

    def update_destination_from_world(self, rack_id: str, world_y: float) -> Optional[MovePreview]:
        """Destination from a vertical scene coordinate (e.g. a drag)."""
        if self._active_id is None:
            return self.update_destination(rack_id, 1)

        rack = self.site.get_rack(rack_id)
        item = self.site.get_equipment(self._active_id)
        if rack is None:
            unit = self._destination[1] if self._destination else item.rack_unit
        else:
            unit = world_position_to_unit(rack, world_y, item.unit_height)
        return self.update_destination(rack_id, unit)

    def commit(self) -> bool:
        """
        Accept the working destination as the item's planned move.

        Stays in PLANNING and returns False when the destination is missing,
        out of bounds, in a missing rack or conflicting.
        """
        source = "planner.commit"

        if self._active_id is None:
            self._fail(create_state_issue(message="No move is being planned", source=source))
            return False

        if self._destination is None:
            self._fail(create_state_issue(
                message="No destination chosen",
                source=source,
                code=ErrorCode.STA_NO_DESTINATION,
                equipment_id=self._active_id,
            ))
            return False

        item = self.site.get_equipment(self._active_id)
        rack_id, unit = self._destination
        preview = self._evaluate(rack_id, unit)
        self._preview = preview

        if not preview.rack_exists:
            self._fail(create_rack_missing_issue(
                message=f"Rack {rack_id} not found",
                source=source,
                rack_id=rack_id,
                equipment_id=item.id,
            ))
            return False

        if not preview.within_bounds:
            rack = self.site.get_rack(rack_id)
            self._fail(create_bounds_issue(
                message=f"{item.unit_height}U at U{unit} does not fit in {rack.name}",
                source=source,
                rack_id=rack_id,
                actual=unit,
                max_val=max_start_unit(rack, item.unit_height),
                equipment_id=item.id,
            ))
            return False

        if preview.has_conflict:
            self._fail(create_conflict_issue(
                message=f"Destination U{unit} in {rack_id} is blocked by {preview.blocking_equipment_id}",
                source=source,
                equipment_id=item.id,
                rack_id=rack_id,
                blocking_equipment_id=preview.blocking_equipment_id,
                reserved=preview.reserved,
            ))
            return False

        self.site = self.site.replace_equipment(commit_plan(item, preview))
        logger.info(f"Planned move of {item.id} to {rack_id} U{unit}")

        self.last_issue = None
        self._reset()
        return True

    def cancel(self) -> None:
        """Leave PLANNING; an earlier accepted plan stays in place."""
        if self._active_id is not None:
            logger.debug(f"Planning of {self._active_id} cancelled")
        self._reset()

    def select_equipment(self, equipment_id: Optional[str]) -> None:
        """Change the selection; selecting another item cancels PLANNING."""
        if self._active_id is not None and equipment_id != self._active_id:
            self.cancel()
        self.selected_equipment_id = equipment_id

    def set_status(self, equipment_id: str, status: FourDStatus) -> OperationResult:
        """
        Status side channel.

        ``modified`` opens PLANNING for the item. Any other status drops the
        item's pending plan and ends PLANNING for it.
        """
        result = update_equipment_status(self.site, equipment_id, status)
        if not result.success:
            self.last_issue = result.issue
            return result

        self.site = result.site
        if status == FourDStatus.MODIFIED:
            self.begin_plan(equipment_id)
        elif self._active_id == equipment_id:
            self.cancel()
        return result

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _evaluate(self, rack_id: str, unit: int) -> MovePreview:
        item = self.site.get_equipment(self._active_id)
        return build_preview(self.site, item, rack_id, unit)

    def _reset(self) -> None:
        self._active_id = None
        self._destination = None
        self._preview = None

    def _fail(self, issue: PlanningIssue) -> None:
        self.last_issue = issue
        logger.debug(f"{issue.source}: {issue.message}")
