"""
planning/ - Conflict detection, move planning and design change commit.
"""

from .conflicts import (
    ConflictResult,
    detect_conflict,
    has_conflict,
    occupied_ranges,
)
from .preview import (
    MovePreview,
    build_preview,
    plan_move,
    commit_plan,
    clear_plan,
    apply_status,
)
from .operations import (
    EquipmentSpec,
    OperationResult,
    add_equipment,
    remove_equipment,
    update_equipment_status,
)
from .planner import MovePhase, MovePlanner
from .committer import (
    CommitReport,
    CommitValidationError,
    apply_changes,
    apply_changes_with_report,
)

__all__ = [
    # Conflicts
    "ConflictResult",
    "detect_conflict",
    "has_conflict",
    "occupied_ranges",
    # Previews
    "MovePreview",
    "build_preview",
    "plan_move",
    "commit_plan",
    "clear_plan",
    "apply_status",
    # Operations
    "EquipmentSpec",
    "OperationResult",
    "add_equipment",
    "remove_equipment",
    "update_equipment_status",
    # Planner
    "MovePhase",
    "MovePlanner",
    # Commit
    "CommitReport",
    "CommitValidationError",
    "apply_changes",
    "apply_changes_with_report",
]
