"""
inventory/ - Rack utilization and site inventory views.
"""

from .summary import (
    RackUsage,
    SiteSummary,
    rack_usage,
    site_summary,
    visible_equipment,
    find_free_slots,
)

__all__ = [
    "RackUsage",
    "SiteSummary",
    "rack_usage",
    "site_summary",
    "visible_equipment",
    "find_free_slots",
]
