"""Stream logging setup for command-line runs."""

from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL_ENV = "DELTA_PACK_LOG_LEVEL"


def configure_logging(level: str | None = None) -> None:
    """Install one stderr handler on the delta_pack logger."""
    name = (level or os.getenv(LOG_LEVEL_ENV, "INFO")).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.INFO

    package_logger = logging.getLogger("delta_pack")
    package_logger.setLevel(numeric)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    package_logger.addHandler(handler)
    package_logger.propagate = False
