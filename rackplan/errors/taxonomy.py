"""
errors/taxonomy.py - Planning issue classification

Structured, non-fatal issues reported by the planning core. Issues are
returned as values alongside results; the core never raises them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid


class ErrorSeverity(Enum):
    """Issue severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ErrorCategory(Enum):
    """Issue categories."""

    # Placement validation (1xxx)
    VALIDATION = "validation"

    # Unit range conflicts (2xxx)
    CONFLICT = "conflict"

    # Rack bounds (3xxx)
    BOUNDS = "bounds"

    # Missing references (4xxx)
    REFERENCE = "reference"

    # Planner / session state (5xxx)
    STATE = "state"

    # Commit batch (6xxx)
    COMMIT = "commit"

    # Persisted snapshots (7xxx)
    PERSISTENCE = "persistence"


class ErrorCode(Enum):
    """Specific issue codes."""

    # Validation (1xxx)
    VAL_FAILED = 1001
    VAL_INVALID_HEIGHT = 1002

    # Conflict (2xxx)
    CON_OVERLAP = 2001
    CON_RESERVED = 2002

    # Bounds (3xxx)
    BND_OUT_OF_RACK = 3001

    # Reference (4xxx)
    REF_EQUIPMENT_NOT_FOUND = 4001
    REF_RACK_NOT_FOUND = 4002
    REF_SITE_NOT_FOUND = 4003

    # State (5xxx)
    STA_NO_ACTIVE_PLAN = 5001
    STA_NO_DESTINATION = 5002
    STA_REMOVED_ITEM = 5003

    # Commit (6xxx)
    CMT_TARGET_RACK_MISSING = 6001
    CMT_ROLLED_BACK = 6002

    # Persistence (7xxx)
    PER_STALE_SNAPSHOT = 7001


@dataclass
class PlanningIssue:
    """Structured issue representation."""

    issue_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])

    code: ErrorCode = ErrorCode.VAL_FAILED
    category: ErrorCategory = ErrorCategory.VALIDATION
    severity: ErrorSeverity = ErrorSeverity.ERROR

    message: str = ""

    # Context
    source: str = ""
    equipment_id: Optional[str] = None
    rack_id: Optional[str] = None

    # Values
    actual_value: Any = None
    expected_value: Any = None

    # Recovery
    recoverable: bool = True
    recovery_options: List[str] = field(default_factory=list)

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    transaction_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issue_id": self.issue_id,
            "code": self.code.value,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "source": self.source,
            "equipment_id": self.equipment_id,
            "rack_id": self.rack_id,
            "recoverable": self.recoverable,
            "recovery_options": list(self.recovery_options),
            "transaction_id": self.transaction_id,
        }


def create_conflict_issue(
    message: str,
    source: str,
    equipment_id: str = None,
    rack_id: str = None,
    blocking_equipment_id: str = None,
    reserved: bool = False,
) -> PlanningIssue:
    """Factory for unit range conflicts."""
    return PlanningIssue(
        code=ErrorCode.CON_RESERVED if reserved else ErrorCode.CON_OVERLAP,
        category=ErrorCategory.CONFLICT,
        severity=ErrorSeverity.ERROR,
        message=message,
        source=source,
        equipment_id=equipment_id,
        rack_id=rack_id,
        actual_value=blocking_equipment_id,
        recovery_options=["choose_other_unit", "choose_other_rack"],
    )


def create_not_found_issue(
    message: str,
    source: str,
    equipment_id: str = None,
) -> PlanningIssue:
    """Factory for unknown equipment references."""
    return PlanningIssue(
        code=ErrorCode.REF_EQUIPMENT_NOT_FOUND,
        category=ErrorCategory.REFERENCE,
        severity=ErrorSeverity.ERROR,
        message=message,
        source=source,
        equipment_id=equipment_id,
    )


def create_rack_missing_issue(
    message: str,
    source: str,
    rack_id: str,
    equipment_id: str = None,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
) -> PlanningIssue:
    """Factory for references to racks that do not exist."""
    return PlanningIssue(
        code=ErrorCode.REF_RACK_NOT_FOUND,
        category=ErrorCategory.REFERENCE,
        severity=severity,
        message=message,
        source=source,
        rack_id=rack_id,
        equipment_id=equipment_id,
        recovery_options=["choose_other_rack"],
    )


def create_bounds_issue(
    message: str,
    source: str,
    rack_id: str,
    actual: Any,
    min_val: int = 1,
    max_val: int = None,
    equipment_id: str = None,
) -> PlanningIssue:
    """Factory for unit ranges that do not fit in the rack."""
    return PlanningIssue(
        code=ErrorCode.BND_OUT_OF_RACK,
        category=ErrorCategory.BOUNDS,
        severity=ErrorSeverity.ERROR,
        message=message,
        source=source,
        rack_id=rack_id,
        equipment_id=equipment_id,
        actual_value=actual,
        expected_value=f"[{min_val}, {max_val}]",
        recovery_options=["choose_other_unit"],
    )


def create_state_issue(
    message: str,
    source: str,
    code: ErrorCode = ErrorCode.STA_NO_ACTIVE_PLAN,
    equipment_id: str = None,
) -> PlanningIssue:
    """Factory for planner state violations."""
    return PlanningIssue(
        code=code,
        category=ErrorCategory.STATE,
        severity=ErrorSeverity.WARNING,
        message=message,
        source=source,
        equipment_id=equipment_id,
    )


def create_commit_issue(
    message: str,
    source: str,
    code: ErrorCode = ErrorCode.CMT_TARGET_RACK_MISSING,
    equipment_id: str = None,
    rack_id: str = None,
    transaction_id: str = None,
) -> PlanningIssue:
    """Factory for anomalies found while applying design changes."""
    return PlanningIssue(
        code=code,
        category=ErrorCategory.COMMIT,
        severity=ErrorSeverity.WARNING if code == ErrorCode.CMT_TARGET_RACK_MISSING else ErrorSeverity.ERROR,
        message=message,
        source=source,
        equipment_id=equipment_id,
        rack_id=rack_id,
        transaction_id=transaction_id,
        recovery_options=["replan_move"] if code == ErrorCode.CMT_TARGET_RACK_MISSING else ["retry"],
    )
