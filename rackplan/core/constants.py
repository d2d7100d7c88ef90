"""
rackplan Physical Constants and Defaults

Rack and equipment geometry defaults (scene units, 1 unit ~ 1 m).
"""

from typing import Dict

# ==================== Rack Geometry ====================

DEFAULT_TOTAL_UNITS = 42
DEFAULT_RACK_WIDTH = 0.6
DEFAULT_RACK_HEIGHT = 2.0
DEFAULT_RACK_DEPTH = 1.0
DEFAULT_RACK_POWER_CAPACITY_W = 10000.0

# Physical height of one rack unit, for display (mm)
RACK_UNIT_MM = 44.5

# ==================== Equipment Footprint ====================

# Only unit height varies between items; width/depth are normalized
STANDARD_EQUIPMENT_WIDTH = 0.48
STANDARD_EQUIPMENT_DEPTH = 0.8

# ==================== Site Layout ====================

RACK_ROW_ORIGIN_X = -7.0
RACK_ROW_ORIGIN_Z = -5.0
RACK_COLUMN_SPACING = 3.0
RACK_ROW_SPACING = 4.0

BUILDING_DIMENSIONS: Dict[str, float] = {
    "width": 20.0,
    "height": 4.0,
    "depth": 15.0,
}

# ==================== Persistence ====================

STORE_NAME = "bim-storage"
SNAPSHOT_VERSION = 2

# Float slack used when mapping coordinates back to unit indices
UNIT_EPSILON = 1e-9
