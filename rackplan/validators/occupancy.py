"""
occupancy.py - Site occupancy validation

Checks a site against the rack occupancy invariant and its reference
integrity rules. Used as a post-condition by the layout generator and the
design change committer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import logging
import time

from rackplan.core.models import Site
from rackplan.geometry.unit_mapper import ranges_overlap

__all__ = [
    'ValidationSeverity',
    'ValidationIssue',
    'ValidationResult',
    'validate_site',
    'validate_rack_occupancy',
]

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class ValidationSeverity(Enum):
    """Severity levels for validation issues."""

    ERROR = "error"           # Violates the occupancy invariant or references
    WARNING = "warning"       # Recoverable at commit time
    INFO = "info"             # Advisory


# =============================================================================
# VALIDATION ISSUE
# =============================================================================

@dataclass
class ValidationIssue:
    """
    A single validation issue found in a site.

    Attributes:
        issue_id: Stable identifier (rule + subject ids)
        severity: Severity level
        category: overlap, bounds, reference, identity, plan
        message: Human-readable description
        rack_id: Affected rack (if applicable)
        equipment_ids: Affected equipment
    """

    issue_id: str
    severity: ValidationSeverity
    category: str
    message: str

    rack_id: Optional[str] = None
    equipment_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "issue_id": self.issue_id,
            "severity": self.severity.value,
            "category": self.category,
            "message": self.message,
            "rack_id": self.rack_id,
            "equipment_ids": list(self.equipment_ids),
        }


# =============================================================================
# VALIDATION RESULT
# =============================================================================

@dataclass
class ValidationResult:
    """Result of validating a site."""

    is_valid: bool = True
    issues: List[ValidationIssue] = field(default_factory=list)

    errors_count: int = 0
    warnings_count: int = 0
    info_count: int = 0

    checked_rules: List[str] = field(default_factory=list)
    validation_time_ms: float = 0.0

    def add_issue(self, issue: ValidationIssue) -> None:
        """Add an issue and update counts."""
        self.issues.append(issue)

        if issue.severity == ValidationSeverity.ERROR:
            self.errors_count += 1
            self.is_valid = False
        elif issue.severity == ValidationSeverity.WARNING:
            self.warnings_count += 1
        elif issue.severity == ValidationSeverity.INFO:
            self.info_count += 1

    def add_error(self, issue_id: str, category: str, message: str, **kwargs) -> None:
        """Convenience method to add an error."""
        self.add_issue(ValidationIssue(
            issue_id=issue_id,
            severity=ValidationSeverity.ERROR,
            category=category,
            message=message,
            **kwargs
        ))

    def add_warning(self, issue_id: str, category: str, message: str, **kwargs) -> None:
        """Convenience method to add a warning."""
        self.add_issue(ValidationIssue(
            issue_id=issue_id,
            severity=ValidationSeverity.WARNING,
            category=category,
            message=message,
            **kwargs
        ))

    def get_issues_by_category(self, category: str) -> List[ValidationIssue]:
        return [i for i in self.issues if i.category == category]

    def get_issues_for_rack(self, rack_id: str) -> List[ValidationIssue]:
        return [i for i in self.issues if i.rack_id == rack_id]

    def merge(self, other: "ValidationResult") -> None:
        """Merge another result into this one."""
        for issue in other.issues:
            self.add_issue(issue)
        self.checked_rules.extend(other.checked_rules)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "is_valid": self.is_valid,
            "issues": [i.to_dict() for i in self.issues],
            "errors_count": self.errors_count,
            "warnings_count": self.warnings_count,
            "info_count": self.info_count,
            "checked_rules": self.checked_rules,
            "validation_time_ms": self.validation_time_ms,
        }


# =============================================================================
# VALIDATION FUNCTIONS
# =============================================================================

def validate_rack_occupancy(site: Site, rack_id: str) -> ValidationResult:
    """
    Check one rack for overlapping active ranges and out-of-bounds items.

    Existing-removed items are exempt from the overlap check.
    """
    result = ValidationResult()
    result.checked_rules.append(f"occupancy:{rack_id}")

    rack = site.get_rack(rack_id)
    items = site.equipment_in_rack(rack_id, active_only=True)

    for item in items:
        if item.unit_height < 1:
            result.add_error(
                issue_id=f"height_{item.id}",
                category="bounds",
                message=f"Equipment {item.name} has invalid unit height {item.unit_height}",
                rack_id=rack_id,
                equipment_ids=[item.id],
            )
        elif rack is not None and not rack.contains_range(item.rack_unit, item.unit_height):
            result.add_error(
                issue_id=f"bounds_{item.id}",
                category="bounds",
                message=(
                    f"Equipment {item.name} occupies U{item.rack_unit}-U{item.unit_end}, "
                    f"outside {rack.name} (1-{rack.total_units})"
                ),
                rack_id=rack_id,
                equipment_ids=[item.id],
            )

    for i, first in enumerate(items):
        for second in items[i + 1:]:
            if ranges_overlap(first.rack_unit, first.unit_end, second.rack_unit, second.unit_end):
                result.add_error(
                    issue_id=f"overlap_{first.id}_{second.id}",
                    category="overlap",
                    message=(
                        f"{first.name} (U{first.rack_unit}-U{first.unit_end}) overlaps "
                        f"{second.name} (U{second.rack_unit}-U{second.unit_end})"
                    ),
                    rack_id=rack_id,
                    equipment_ids=[first.id, second.id],
                )

    return result


def validate_site(site: Site) -> ValidationResult:
    """
    Validate a site against occupancy and reference rules.

    Args:
        site: Site to validate

    Returns:
        ValidationResult with any issues found
    """
    start = time.time()
    result = ValidationResult()

    # Identity
    result.checked_rules.append("unique_ids")
    seen_racks = set()
    for rack in site.racks:
        if rack.id in seen_racks:
            result.add_error(
                issue_id=f"duplicate_rack_{rack.id}",
                category="identity",
                message=f"Duplicate rack id {rack.id}",
                rack_id=rack.id,
            )
        seen_racks.add(rack.id)

    seen_equipment = set()
    for item in site.equipment:
        if item.id in seen_equipment:
            result.add_error(
                issue_id=f"duplicate_equipment_{item.id}",
                category="identity",
                message=f"Duplicate equipment id {item.id}",
                equipment_ids=[item.id],
            )
        seen_equipment.add(item.id)

    # References
    result.checked_rules.append("rack_references")
    for item in site.equipment:
        if item.rack_id not in seen_racks:
            result.add_error(
                issue_id=f"dangling_rack_{item.id}",
                category="reference",
                message=f"Equipment {item.name} references missing rack {item.rack_id}",
                rack_id=item.rack_id,
                equipment_ids=[item.id],
            )

        if item.planned_move is not None and item.planned_move.target_rack_id not in seen_racks:
            result.add_warning(
                issue_id=f"dangling_plan_{item.id}",
                category="plan",
                message=(
                    f"Planned move for {item.name} targets missing rack "
                    f"{item.planned_move.target_rack_id}"
                ),
                rack_id=item.planned_move.target_rack_id,
                equipment_ids=[item.id],
            )

    # Occupancy
    for rack in site.racks:
        result.merge(validate_rack_occupancy(site, rack.id))

    result.validation_time_ms = (time.time() - start) * 1000

    if not result.is_valid:
        logger.debug(f"Site {site.id} failed validation with {result.errors_count} errors")

    return result
