"""Logging utilities for the ecb_rates package."""

from __future__ import annotations

import logging
from typing import Optional

_CONFIGURED: Optional[logging.Logger] = None

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = "ecb_rates") -> logging.Logger:
    """Return a named logger, configuring the root handler on first use."""
    global _CONFIGURED
    if _CONFIGURED is None:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        _CONFIGURED = logging.getLogger("ecb_rates")
    return logging.getLogger(name)
