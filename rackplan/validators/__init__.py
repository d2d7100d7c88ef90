"""
validators/ - Site occupancy and reference validation.
"""

from .occupancy import (
    ValidationSeverity,
    ValidationIssue,
    ValidationResult,
    validate_site,
    validate_rack_occupancy,
)

__all__ = [
    "ValidationSeverity",
    "ValidationIssue",
    "ValidationResult",
    "validate_site",
    "validate_rack_occupancy",
]
