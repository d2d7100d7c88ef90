"""
planning/committer.py - Design change commit

Applies every pending planned move of a site in one batch. The batch is
all-or-nothing: if anything goes wrong, or the result would break the
occupancy invariant, the caller gets the original site back.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional
import logging

from rackplan.core.models import Equipment, Site
from rackplan.errors.taxonomy import ErrorCode, PlanningIssue, create_commit_issue
from rackplan.geometry.unit_mapper import equipment_dimensions, equipment_position
from rackplan.transactions.manager import TransactionManager
from rackplan.transactions.schemas import Transaction, TransactionStatus
from rackplan.validators.occupancy import validate_site

__all__ = [
    "CommitReport",
    "CommitValidationError",
    "apply_changes",
    "apply_changes_with_report",
]

logger = logging.getLogger(__name__)


class CommitValidationError(Exception):
    """The committed site would violate the occupancy invariant."""


@dataclass
class CommitReport:
    """Outcome of applying design changes."""
    site: Site
    applied_ids: List[str] = field(default_factory=list)
    dropped_ids: List[str] = field(default_factory=list)
    issues: List[PlanningIssue] = field(default_factory=list)
    transaction: Optional[Transaction] = None

    @property
    def rolled_back(self) -> bool:
        return (
            self.transaction is not None
            and self.transaction.status == TransactionStatus.ROLLED_BACK
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "site_id": self.site.id,
            "applied_ids": list(self.applied_ids),
            "dropped_ids": list(self.dropped_ids),
            "issues": [i.to_dict() for i in self.issues],
            "transaction": self.transaction.to_dict() if self.transaction else None,
            "rolled_back": self.rolled_back,
        }


def _relocate(site: Site, item: Equipment) -> Equipment:
    plan = item.planned_move
    rack = site.get_rack(plan.target_rack_id)
    return replace(
        item,
        rack_id=rack.id,
        rack_unit=plan.target_rack_unit,
        position=equipment_position(rack, plan.target_rack_unit, item.unit_height),
        dimensions=equipment_dimensions(rack, item.unit_height),
        planned_move=None,
        previous_position=None,
    )


def _placement_issues(site: Site):
    validation = validate_site(site)
    return validation.get_issues_by_category("overlap") + validation.get_issues_by_category("bounds")


def apply_changes_with_report(
    site: Site,
    manager: Optional[TransactionManager] = None,
) -> CommitReport:
    """
    Commit all planned moves of ``site``.

    Items whose target rack no longer exists keep their origin and lose the
    plan. Statuses are never rewritten and nothing is deleted.

    Args:
        site: Site to commit (not mutated)
        manager: Transaction manager to record the batch in

    Returns:
        CommitReport with the new site, or the original site on rollback
    """
    manager = manager or TransactionManager()
    report = CommitReport(site=site)

    try:
        with manager.transaction(site, source="apply_changes", description="Apply design changes") as tx:
            report.transaction = tx
            updated: List[Equipment] = []

            for item in site.equipment:
                plan = item.planned_move
                if plan is None:
                    updated.append(item)
                    continue

                if site.get_rack(plan.target_rack_id) is None:
                    logger.warning(
                        f"Dropping planned move of {item.id}: target rack "
                        f"{plan.target_rack_id} no longer exists"
                    )
                    report.dropped_ids.append(item.id)
                    report.issues.append(create_commit_issue(
                        message=f"Target rack {plan.target_rack_id} of {item.name} no longer exists",
                        source="committer.apply_changes",
                        code=ErrorCode.CMT_TARGET_RACK_MISSING,
                        equipment_id=item.id,
                        rack_id=plan.target_rack_id,
                        transaction_id=tx.transaction_id,
                    ))
                    updated.append(replace(item, planned_move=None, previous_position=None))
                    manager.record_change(
                        f"equipment.{item.id}.planned_move", plan.to_dict(), None,
                        source="apply_changes",
                    )
                    continue

                moved = _relocate(site, item)
                updated.append(moved)
                report.applied_ids.append(item.id)
                manager.record_change(
                    f"equipment.{item.id}.location",
                    {"rackId": item.rack_id, "rackUnit": item.rack_unit},
                    {"rackId": moved.rack_id, "rackUnit": moved.rack_unit},
                    source="apply_changes",
                )

            candidate = site.with_equipment(updated)

            # Only violations introduced by this batch count
            baseline = {i.issue_id for i in _placement_issues(site)}
            overlaps = [i for i in _placement_issues(candidate) if i.issue_id not in baseline]
            if overlaps:
                raise CommitValidationError("; ".join(i.message for i in overlaps))

            report.site = candidate

    except Exception as e:
        logger.error(f"Design changes for site {site.id} rolled back: {e}")
        report.site = site
        report.applied_ids = []
        report.dropped_ids = []
        report.issues = [create_commit_issue(
            message=f"Design changes rolled back: {e}",
            source="committer.apply_changes",
            code=ErrorCode.CMT_ROLLED_BACK,
            transaction_id=report.transaction.transaction_id if report.transaction else None,
        )]
        return report

    if report.applied_ids or report.dropped_ids:
        logger.info(
            f"Applied {len(report.applied_ids)} moves on site {site.id} "
            f"({len(report.dropped_ids)} dropped)"
        )
    return report


def apply_changes(site: Site) -> Site:
    """Commit all planned moves and return the resulting site."""
    return apply_changes_with_report(site).site
