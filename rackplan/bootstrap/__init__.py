"""
bootstrap/ - Configuration loading and application entry points.
"""

from .config import (
    LayoutDefaults,
    APIConfig,
    StorageConfig,
    LoggingConfig,
    RackPlanConfig,
    load_config,
    get_config,
)
from .entrypoints import setup_logging, configure_logging, api_main

__all__ = [
    "LayoutDefaults",
    "APIConfig",
    "StorageConfig",
    "LoggingConfig",
    "RackPlanConfig",
    "load_config",
    "get_config",
    "setup_logging",
    "configure_logging",
    "api_main",
]
