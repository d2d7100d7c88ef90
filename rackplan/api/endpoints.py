"""
api/endpoints.py - Planning REST API routes

FastAPI endpoints over a ``PlanningSession``.

Endpoints:
- GET  /api/v1/sites - List sites
- GET  /api/v1/sites/{site_id} - Full site record
- GET  /api/v1/sites/{site_id}/summary - Inventory and rack utilization
- POST /api/v1/sites/{site_id}/conflicts - Check a placement for conflicts
- POST /api/v1/sites/{site_id}/moves/{equipment_id}/begin - Start planning a move
- PUT  /api/v1/sites/{site_id}/moves/{equipment_id}/destination - Update destination
- POST /api/v1/sites/{site_id}/moves/{equipment_id}/commit - Accept destination
- POST /api/v1/sites/{site_id}/moves/{equipment_id}/cancel - Abandon planning
- POST /api/v1/sites/{site_id}/equipment - Add equipment
- PUT  /api/v1/sites/{site_id}/equipment/{equipment_id}/status - Change 4D status
- POST /api/v1/sites/{site_id}/apply - Apply design changes
"""

from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from rackplan.core.enums import EquipmentType, FourDStatus
from rackplan.core.models import Site
from rackplan.errors.taxonomy import ErrorCategory, PlanningIssue
from rackplan.inventory.summary import site_summary
from rackplan.planning.conflicts import detect_conflict
from rackplan.planning.operations import EquipmentSpec
from rackplan.planning.preview import MovePreview
from rackplan.session.session import PlanningSession

__all__ = [
    'create_planning_router',
    'SiteInfo',
    'SiteListResponse',
    'SiteResponse',
    'SummaryResponse',
    'ConflictRequest',
    'ConflictResponse',
    'DestinationRequest',
    'PreviewResponse',
    'MoveCommitResponse',
    'AddEquipmentRequest',
    'StatusRequest',
    'OperationResponse',
    'ApplyResponse',
]

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class SiteInfo(BaseModel):
    """Site list entry."""
    id: str
    name: str
    city: str = ""
    state: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    rack_count: int = 0
    equipment_count: int = 0


class SiteListResponse(BaseModel):
    """All loaded sites."""
    sites: List[SiteInfo]


class SiteResponse(BaseModel):
    """Full site record."""
    site_id: str
    site: Dict[str, Any]


class SummaryResponse(BaseModel):
    """Inventory summary of a site."""
    site_id: str
    summary: Dict[str, Any]


class ConflictRequest(BaseModel):
    """Placement to check."""
    rack_id: str
    rack_unit: int = Field(..., description="1-based start unit")
    equipment_id: Optional[str] = Field(None, description="Item being placed, excluded from the check")
    unit_height: Optional[int] = Field(None, ge=1, description="Defaults to the item's height")
    include_planned: bool = Field(False, description="Treat pending destinations as occupied")


class ConflictResponse(BaseModel):
    """Conflict check outcome."""
    has_conflict: bool
    target_rack_id: str
    target_start: int
    target_end: int
    blocking_equipment_id: Optional[str] = None
    conflicting_ids: List[str] = []
    reserved_by: List[str] = []


class DestinationRequest(BaseModel):
    """New working destination; give either ``rack_unit`` or ``world_y``."""
    rack_id: str
    rack_unit: Optional[int] = None
    world_y: Optional[float] = Field(None, description="Vertical scene coordinate")


class PreviewResponse(BaseModel):
    """Live move preview."""
    equipment_id: str
    target_rack_id: str
    target_rack_unit: int
    has_conflict: bool
    blocking_equipment_id: Optional[str] = None
    within_bounds: bool
    rack_exists: bool
    reserved: bool = False
    is_valid: bool
    phase: str


class MoveCommitResponse(BaseModel):
    """Result of accepting a destination."""
    success: bool
    equipment_id: str
    planned_move: Optional[Dict[str, Any]] = None
    phase: str


class AddEquipmentRequest(BaseModel):
    """Equipment to add."""
    name: str
    equipment_type: EquipmentType = EquipmentType.SERVER
    rack_id: str
    rack_unit: int = 1
    unit_height: Optional[int] = None
    power_consumption: Optional[float] = None
    customer: Optional[str] = None
    notes: Optional[str] = None


class StatusRequest(BaseModel):
    """New 4D status."""
    status: FourDStatus


class OperationResponse(BaseModel):
    """Result of an equipment operation."""
    success: bool
    equipment_id: Optional[str] = None
    equipment: Optional[Dict[str, Any]] = None
    phase: Optional[str] = None


class ApplyResponse(BaseModel):
    """Result of applying design changes."""
    site_id: str
    applied_ids: List[str] = []
    dropped_ids: List[str] = []
    rolled_back: bool = False
    transaction_id: Optional[str] = None
    issues: List[Dict[str, Any]] = []


# =============================================================================
# HELPERS
# =============================================================================

def _issue_status(issue: PlanningIssue) -> int:
    """Missing references are 404; everything else refused is 409."""
    if issue.category == ErrorCategory.REFERENCE:
        return 404
    return 409


def _raise_for_issue(issue: Optional[PlanningIssue], fallback: str) -> None:
    if issue is None:
        raise HTTPException(status_code=409, detail=fallback)
    raise HTTPException(status_code=_issue_status(issue), detail=issue.message)


def _preview_response(preview: MovePreview, phase: str) -> PreviewResponse:
    return PreviewResponse(
        equipment_id=preview.equipment_id,
        target_rack_id=preview.target_rack_id,
        target_rack_unit=preview.target_rack_unit,
        has_conflict=preview.has_conflict,
        blocking_equipment_id=preview.blocking_equipment_id,
        within_bounds=preview.within_bounds,
        rack_exists=preview.rack_exists,
        reserved=preview.reserved,
        is_valid=preview.is_valid,
        phase=phase,
    )


# =============================================================================
# ROUTER FACTORY
# =============================================================================

def create_planning_router(session: PlanningSession) -> APIRouter:
    """
    Create FastAPI router for site planning endpoints.

    Args:
        session: Planning session the routes operate on

    Returns:
        FastAPI APIRouter
    """
    router = APIRouter(
        prefix="/api/v1/sites",
        tags=["planning"],
    )

    def require_site(site_id: str) -> Site:
        session.load_sites()
        site = session.ensure_site(site_id)
        if site is None:
            raise HTTPException(status_code=404, detail=f"Site {site_id} not found")
        return site

    def require_equipment(site: Site, equipment_id: str) -> None:
        if site.get_equipment(equipment_id) is None:
            raise HTTPException(
                status_code=404,
                detail=f"Equipment {equipment_id} not found in site {site.id}",
            )

    def require_planning(equipment_id: str) -> None:
        if session.planner.active_equipment_id != equipment_id:
            raise HTTPException(
                status_code=409,
                detail=f"No move is being planned for {equipment_id}",
            )

    # =========================================================================
    # SITE ENDPOINTS
    # =========================================================================

    @router.get("", response_model=SiteListResponse)
    async def list_sites() -> SiteListResponse:
        """List loaded sites, generating them on first use."""
        sites = session.load_sites()
        return SiteListResponse(sites=[
            SiteInfo(
                id=s.id,
                name=s.name,
                city=s.city,
                state=s.state,
                lat=s.coordinates.lat if s.coordinates else None,
                lng=s.coordinates.lng if s.coordinates else None,
                rack_count=len(s.racks),
                equipment_count=len(s.equipment),
            )
            for s in sites
        ])

    @router.get("/{site_id}", response_model=SiteResponse)
    async def get_site(site_id: str) -> SiteResponse:
        """Full site record including racks and equipment."""
        site = require_site(site_id)
        return SiteResponse(site_id=site.id, site=site.to_dict())

    @router.get("/{site_id}/summary", response_model=SummaryResponse)
    async def get_summary(site_id: str) -> SummaryResponse:
        """Counts by status and type plus per-rack utilization."""
        site = require_site(site_id)
        return SummaryResponse(site_id=site.id, summary=site_summary(site).to_dict())

    # =========================================================================
    # CONFLICT ENDPOINT
    # =========================================================================

    @router.post("/{site_id}/conflicts", response_model=ConflictResponse)
    async def check_conflict(site_id: str, request: ConflictRequest) -> ConflictResponse:
        """
        Check whether a placement overlaps active equipment.

        A conflict is a normal 200 response; only unknown racks or items
        are errors.
        """
        site = require_site(site_id)
        if site.get_rack(request.rack_id) is None:
            raise HTTPException(status_code=404, detail=f"Rack {request.rack_id} not found")
        if request.equipment_id is not None and request.unit_height is None:
            require_equipment(site, request.equipment_id)

        result = detect_conflict(
            site,
            request.equipment_id,
            request.rack_id,
            request.rack_unit,
            moving_height=request.unit_height,
            include_planned=request.include_planned,
        )
        return ConflictResponse(**result.to_dict())

    # =========================================================================
    # MOVE PLANNING ENDPOINTS
    # =========================================================================

    @router.post("/{site_id}/moves/{equipment_id}/begin", response_model=PreviewResponse)
    async def begin_move(site_id: str, equipment_id: str) -> PreviewResponse:
        """Open planning for an item; the preview starts at its current target."""
        site = require_site(site_id)
        require_equipment(site, equipment_id)

        preview = session.begin_move(equipment_id)
        if preview is None:
            _raise_for_issue(session.planner.last_issue, f"Cannot plan a move for {equipment_id}")
        return _preview_response(preview, session.planner.phase_of(equipment_id).value)

    @router.put("/{site_id}/moves/{equipment_id}/destination", response_model=PreviewResponse)
    async def update_destination(
        site_id: str,
        equipment_id: str,
        request: DestinationRequest,
    ) -> PreviewResponse:
        """Set the working destination; conflicts are reported in the preview."""
        require_site(site_id)
        require_planning(equipment_id)

        if request.rack_unit is not None:
            preview = session.update_move_destination(request.rack_id, request.rack_unit)
        elif request.world_y is not None:
            preview = session.update_move_destination_from_world(request.rack_id, request.world_y)
        else:
            raise HTTPException(status_code=400, detail="Either rack_unit or world_y is required")

        return _preview_response(preview, session.planner.phase_of(equipment_id).value)

    @router.post("/{site_id}/moves/{equipment_id}/commit", response_model=MoveCommitResponse)
    async def commit_move(site_id: str, equipment_id: str) -> MoveCommitResponse:
        """Accept the working destination as the item's planned move."""
        require_site(site_id)
        require_planning(equipment_id)

        if not session.commit_move():
            _raise_for_issue(session.planner.last_issue, f"Move of {equipment_id} not committed")

        item = session.current_site.get_equipment(equipment_id)
        return MoveCommitResponse(
            success=True,
            equipment_id=equipment_id,
            planned_move=item.planned_move.to_dict() if item.planned_move else None,
            phase=session.planner.phase_of(equipment_id).value,
        )

    @router.post("/{site_id}/moves/{equipment_id}/cancel", response_model=MoveCommitResponse)
    async def cancel_move(site_id: str, equipment_id: str) -> MoveCommitResponse:
        """Abandon planning; an earlier accepted plan is kept."""
        site = require_site(site_id)
        require_equipment(site, equipment_id)

        if session.planner.active_equipment_id == equipment_id:
            session.cancel_move()

        item = session.current_site.get_equipment(equipment_id)
        return MoveCommitResponse(
            success=True,
            equipment_id=equipment_id,
            planned_move=item.planned_move.to_dict() if item.planned_move else None,
            phase=session.planner.phase_of(equipment_id).value,
        )

    # =========================================================================
    # EQUIPMENT ENDPOINTS
    # =========================================================================

    @router.post("/{site_id}/equipment", response_model=OperationResponse)
    async def add_equipment(site_id: str, request: AddEquipmentRequest) -> OperationResponse:
        """Add a proposed item; refused on missing rack, bounds or conflict."""
        require_site(site_id)

        result = session.add_equipment(EquipmentSpec(
            name=request.name,
            equipment_type=request.equipment_type,
            rack_id=request.rack_id,
            rack_unit=request.rack_unit,
            unit_height=request.unit_height,
            power_consumption=request.power_consumption,
            customer=request.customer,
            notes=request.notes,
        ))
        if not result.success:
            _raise_for_issue(result.issue, "Equipment not added")

        item = result.site.get_equipment(result.equipment_id)
        return OperationResponse(
            success=True,
            equipment_id=item.id,
            equipment=item.to_dict(),
        )

    @router.put("/{site_id}/equipment/{equipment_id}/status", response_model=OperationResponse)
    async def set_status(
        site_id: str,
        equipment_id: str,
        request: StatusRequest,
    ) -> OperationResponse:
        """Change an item's 4D status; ``modified`` opens move planning."""
        site = require_site(site_id)
        require_equipment(site, equipment_id)

        result = session.set_equipment_status(equipment_id, request.status)
        if not result.success:
            _raise_for_issue(result.issue, f"Status of {equipment_id} not changed")

        item = session.current_site.get_equipment(equipment_id)
        return OperationResponse(
            success=True,
            equipment_id=equipment_id,
            equipment=item.to_dict(),
            phase=session.planner.phase_of(equipment_id).value,
        )

    # =========================================================================
    # APPLY ENDPOINT
    # =========================================================================

    @router.post("/{site_id}/apply", response_model=ApplyResponse)
    async def apply_design_changes(site_id: str) -> ApplyResponse:
        """Commit every planned move of the site in one batch."""
        require_site(site_id)

        report = session.apply_design_changes()
        return ApplyResponse(
            site_id=site_id,
            applied_ids=report.applied_ids,
            dropped_ids=report.dropped_ids,
            rolled_back=report.rolled_back,
            transaction_id=report.transaction.transaction_id if report.transaction else None,
            issues=[i.to_dict() for i in report.issues],
        )

    return router
