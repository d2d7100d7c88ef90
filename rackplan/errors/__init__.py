"""
errors/ - Planning issue taxonomy

Structured classification for the non-fatal outcomes of planning
operations (conflicts, missing references, bounds, commit anomalies).
"""

from .taxonomy import (
    ErrorSeverity,
    ErrorCategory,
    ErrorCode,
    PlanningIssue,
    create_conflict_issue,
    create_not_found_issue,
    create_rack_missing_issue,
    create_bounds_issue,
    create_state_issue,
    create_commit_issue,
)

__all__ = [
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorCode",
    "PlanningIssue",
    "create_conflict_issue",
    "create_not_found_issue",
    "create_rack_missing_issue",
    "create_bounds_issue",
    "create_state_issue",
    "create_commit_issue",
]
