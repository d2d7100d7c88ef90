"""
bootstrap/entrypoints.py - Application entry points

Logging setup and the API server entry point.
"""

from __future__ import annotations
from typing import List, Optional
import argparse
import json
import logging
import sys

from .config import DEFAULT_LOG_FORMAT, LoggingConfig, load_config

logger = logging.getLogger("rackplan.bootstrap.entrypoints")

_HANDLER_TAG = "_rackplan_handler"


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record):
        return json.dumps({
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    fmt: str = DEFAULT_LOG_FORMAT,
) -> List[logging.Handler]:
    """
    Install rackplan's console and file handlers on the root logger.

    Handlers from an earlier call are replaced rather than stacked, so a
    reloaded server or a second script run logs each line once.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: One JSON object per line instead of ``fmt``
        fmt: ``logging.Formatter`` format string for plain-text output

    Returns:
        The handlers now installed
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = JSONFormatter() if json_format else logging.Formatter(fmt)

    root_logger = logging.getLogger()
    for handler in [h for h in root_logger.handlers if getattr(h, _HANDLER_TAG, False)]:
        root_logger.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        setattr(handler, _HANDLER_TAG, True)
        root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # uvicorn logs every request at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    return handlers


def configure_logging(config: LoggingConfig, level: Optional[str] = None) -> List[logging.Handler]:
    """Apply a ``LoggingConfig``; ``level`` overrides the configured level."""
    return setup_logging(
        level=level or config.level,
        log_file=config.log_file,
        json_format=config.json_logs,
        fmt=config.format,
    )


def api_main(args: list = None) -> None:
    """
    API server entry point.

    Args:
        args: Command line arguments
    """
    parser = argparse.ArgumentParser(
        description="rackplan API Server",
        prog="rackplan-api",
    )

    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        help="API port",
        default=None,
    )
    parser.add_argument(
        "-H", "--host",
        help="API host",
        default=None,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level",
    )

    parsed = parser.parse_args(args)

    config = load_config(parsed.config)

    configure_logging(config.logging, level=parsed.log_level)

    # Override config with CLI args
    if parsed.port:
        config.api.port = parsed.port
    if parsed.host:
        config.api.host = parsed.host

    try:
        import uvicorn
        from rackplan.api.app import create_app

        app = create_app(config)
        uvicorn.run(app, host=config.api.host, port=config.api.port)

    except KeyboardInterrupt:
        print("\nShutting down...")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


def main():
    """Main entry point for the package."""
    api_main(sys.argv[1:])


if __name__ == "__main__":
    main()
