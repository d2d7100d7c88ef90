#!/usr/bin/env python3
"""
rackplan Layout Generator

Generates the demo site portfolio and prints per-rack utilization, or dumps
the sites as JSON.

Usage:
    python scripts/generate_layout.py
    python scripts/generate_layout.py --seed 7 --json > sites.json

Examples:
    # Reproducible layout with fuller racks
    python scripts/generate_layout.py --seed 42 --utilization 0.7

    # Plain layout without the demo proposed/future seeds
    python scripts/generate_layout.py --no-demo-seeds
"""

import argparse
import json
import sys
import os

# Ensure rackplan is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rackplan.bootstrap.entrypoints import setup_logging
from rackplan.inventory.summary import site_summary
from rackplan.layout.generator import LayoutConfig, LayoutGenerator


def print_header(title: str):
    """Print a formatted header."""
    print("\n" + "=" * 70)
    print(f" {title}")
    print("=" * 70)


def print_section(title: str):
    """Print a formatted section header."""
    print(f"\n--- {title} ---")


def main():
    parser = argparse.ArgumentParser(description="Generate rackplan demo sites")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--utilization", type=float, default=None,
                        help="Fixed rack utilization target (0-1)")
    parser.add_argument("--no-demo-seeds", action="store_true",
                        help="Skip the proposed/future demo equipment")
    parser.add_argument("--json", action="store_true", help="Print sites as JSON")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    setup_logging(level=args.log_level)

    config = LayoutConfig(
        seed=args.seed,
        utilization_target=args.utilization,
        include_demo_seeds=not args.no_demo_seeds,
    )
    result = LayoutGenerator(config).generate()

    if args.json:
        print(json.dumps([s.to_dict() for s in result.sites], indent=2))
        return 0 if result.success else 1

    print_header("RACKPLAN LAYOUT")
    print(f"  Sites: {len(result.sites)}")
    print(f"  Skipped placements: {result.skipped_placements}")
    print(f"  Generated in {result.generation_time_ms:.1f} ms")

    for site in result.sites:
        summary = site_summary(site)
        print_section(f"{site.name} ({site.id})")
        print(f"  Equipment: {summary.equipment_count}  Power: {summary.total_power:.0f} W")
        for usage in summary.racks:
            print(
                f"  {usage.rack_name:<10} {usage.used_units:>3}/{usage.total_units}U "
                f"({usage.utilization:5.1%})  {usage.equipment_count:>2} items  "
                f"{usage.power_draw:>6.0f} W"
            )
        validation = result.validation.get(site.id)
        if validation is not None and not validation.is_valid:
            print("  ! site failed validation")

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
