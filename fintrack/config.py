"""Configuration management for fintrack.

This module centralizes configuration values including the data
directory, display defaults, and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import structlog

# Base project root - assumes this file is in fintrack/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directory holding one JSON file per storage slot
DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))

LOG_LEVEL = os.getenv("FINTRACK_LOG_LEVEL", "INFO").upper()

# Display defaults
DEFAULT_CURRENCY = "USD"
DEFAULT_DESCRIPTION = "Unknown Transaction"


def configure_logging(level: str | None = None) -> None:
    """Install the structlog processor chain used by scripts.

    Library modules only call ``structlog.get_logger()``; nothing is
    configured on import so callers keep control of the output.
    """
    level_name = (level or LOG_LEVEL).upper()
    logging.basicConfig(format="%(message)s", level=getattr(logging, level_name, logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
