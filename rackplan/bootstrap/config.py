"""
bootstrap/config.py - Application configuration

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from pathlib import Path
import os
import json
import logging

from rackplan.core.constants import DEFAULT_TOTAL_UNITS, STORE_NAME

logger = logging.getLogger("rackplan.bootstrap.config")

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class LayoutDefaults:
    """Site generation defaults."""

    rack_rows: int = 2
    racks_per_row: int = 4
    total_units: int = DEFAULT_TOTAL_UNITS
    utilization_min: float = 0.4
    utilization_max: float = 0.6
    pdu_probability: float = 0.7
    seed: Optional[int] = None
    include_demo_seeds: bool = True

    @classmethod
    def from_env(cls) -> "LayoutDefaults":
        seed = os.getenv("RACKPLAN_LAYOUT_SEED")
        return cls(
            rack_rows=int(os.getenv("RACKPLAN_LAYOUT_RACK_ROWS", "2")),
            racks_per_row=int(os.getenv("RACKPLAN_LAYOUT_RACKS_PER_ROW", "4")),
            total_units=int(os.getenv("RACKPLAN_LAYOUT_TOTAL_UNITS", str(DEFAULT_TOTAL_UNITS))),
            utilization_min=float(os.getenv("RACKPLAN_LAYOUT_UTILIZATION_MIN", "0.4")),
            utilization_max=float(os.getenv("RACKPLAN_LAYOUT_UTILIZATION_MAX", "0.6")),
            pdu_probability=float(os.getenv("RACKPLAN_LAYOUT_PDU_PROBABILITY", "0.7")),
            seed=int(seed) if seed else None,
            include_demo_seeds=_env_bool("RACKPLAN_LAYOUT_DEMO_SEEDS", "true"),
        )

    @property
    def utilization_range(self) -> Tuple[float, float]:
        return (self.utilization_min, self.utilization_max)

    def to_layout_config(self):
        """Build the generator's ``LayoutConfig``."""
        from rackplan.layout.generator import LayoutConfig

        return LayoutConfig(
            rack_rows=self.rack_rows,
            racks_per_row=self.racks_per_row,
            total_units=self.total_units,
            utilization_range=self.utilization_range,
            pdu_probability=self.pdu_probability,
            seed=self.seed,
            include_demo_seeds=self.include_demo_seeds,
        )


@dataclass
class APIConfig:
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    enable_docs: bool = True
    docs_url: str = "/docs"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "APIConfig":
        cors = os.getenv("RACKPLAN_API_CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("RACKPLAN_API_HOST", "0.0.0.0"),
            port=int(os.getenv("RACKPLAN_API_PORT", "8000")),
            enable_docs=_env_bool("RACKPLAN_API_ENABLE_DOCS", "true"),
            docs_url=os.getenv("RACKPLAN_API_DOCS_URL", "/docs"),
            cors_origins=cors.split(",") if cors else ["*"],
        )


@dataclass
class StorageConfig:
    """Snapshot storage configuration."""

    snapshots_dir: Optional[str] = None  # None keeps snapshots in memory
    store_name: str = STORE_NAME
    autosave: bool = True

    @classmethod
    def from_env(cls) -> "StorageConfig":
        return cls(
            snapshots_dir=os.getenv("RACKPLAN_SNAPSHOTS_DIR"),
            store_name=os.getenv("RACKPLAN_STORE_NAME", STORE_NAME),
            autosave=_env_bool("RACKPLAN_AUTOSAVE", "true"),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("RACKPLAN_LOG_LEVEL", "INFO"),
            format=os.getenv("RACKPLAN_LOG_FORMAT", DEFAULT_LOG_FORMAT),
            log_file=os.getenv("RACKPLAN_LOG_FILE"),
            json_logs=_env_bool("RACKPLAN_JSON_LOGS", "false"),
        )


@dataclass
class RackPlanConfig:
    """Root configuration for the rackplan application."""

    environment: str = "development"
    debug: bool = False
    version: str = "0.1.0"

    layout: LayoutDefaults = field(default_factory=LayoutDefaults)
    api: APIConfig = field(default_factory=APIConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "RackPlanConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("RACKPLAN_ENVIRONMENT", "development"),
            debug=_env_bool("RACKPLAN_DEBUG", "false"),
            layout=LayoutDefaults.from_env(),
            api=APIConfig.from_env(),
            storage=StorageConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "RackPlanConfig":
        """Load configuration from JSON file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        with open(path) as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "RackPlanConfig":
        """Create config from dictionary."""
        config = cls.from_env()

        # Override with file values
        if "environment" in data:
            config.environment = data["environment"]
        if "debug" in data:
            config.debug = data["debug"]

        for section in ("layout", "api", "storage", "logging"):
            if section in data:
                target = getattr(config, section)
                for key, value in data[section].items():
                    if hasattr(target, key):
                        setattr(target, key, value)

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "version": self.version,
            "layout": {
                "rack_rows": self.layout.rack_rows,
                "racks_per_row": self.layout.racks_per_row,
                "total_units": self.layout.total_units,
                "utilization_min": self.layout.utilization_min,
                "utilization_max": self.layout.utilization_max,
                "pdu_probability": self.layout.pdu_probability,
                "seed": self.layout.seed,
                "include_demo_seeds": self.layout.include_demo_seeds,
            },
            "api": {
                "host": self.api.host,
                "port": self.api.port,
                "enable_docs": self.api.enable_docs,
            },
            "storage": {
                "snapshots_dir": self.storage.snapshots_dir,
                "store_name": self.storage.store_name,
                "autosave": self.storage.autosave,
            },
            "logging": {
                "level": self.logging.level,
                "log_file": self.logging.log_file,
                "json_logs": self.logging.json_logs,
            },
        }


# Global config instance
_config: Optional[RackPlanConfig] = None


def load_config(filepath: str = None) -> RackPlanConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        RackPlanConfig instance
    """
    global _config

    if filepath:
        _config = RackPlanConfig.from_file(filepath)
    else:
        default_paths = [
            "./rackplan.json",
            "./config/rackplan.json",
            os.path.expanduser("~/.rackplan/config.json"),
        ]

        for path in default_paths:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                _config = RackPlanConfig.from_file(path)
                return _config

        # Fall back to environment
        _config = RackPlanConfig.from_env()

    logger.info(f"Configuration loaded: environment={_config.environment}")
    return _config


def get_config() -> RackPlanConfig:
    """Get current configuration, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
