"""Runtime settings for the flight network package."""
from __future__ import annotations

import logging
import os
from typing import Optional, Union

# Reservations only live as long as the process unless a file URL is supplied.
DB_URL = os.environ.get("FLIGHT_NETWORK_DB_URL", "sqlite+pysqlite:///:memory:")

MAX_RESERVATIONS = int(os.environ.get("FLIGHT_NETWORK_MAX_RESERVATIONS", 100))
MAX_CITIES = int(os.environ.get("FLIGHT_NETWORK_MAX_CITIES", 30))

LOG_LEVEL = os.environ.get("FLIGHT_NETWORK_LOG_LEVEL", "WARNING")

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Attach a stream handler to the package logger and set its level."""

    if level is None:
        level = LOG_LEVEL
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level '{level}'.")
        level = numeric

    logger = logging.getLogger("flight_network")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
