"""Logging utilities with structured output for the property sales backend."""

from __future__ import annotations

import logging
import os
from typing import Optional

_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(namespace: str = "backend", level: Optional[str] = None) -> logging.Logger:
    """Return a namespaced logger configured for structured output.

    Records are single lines with key=value pairs (``unit_added property=...``)
    so the store's audit trail can be grepped or shipped to an aggregator.
    Calling this twice never attaches a second handler.
    """

    logger = logging.getLogger(namespace)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    logger.addHandler(handler)
    logger.setLevel((level or _LOG_LEVEL).upper())
    logger.propagate = False
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    """Helper to retrieve a child of the ``backend`` logger."""

    base = configure_logging()
    if child:
        return base.getChild(child)
    return base
