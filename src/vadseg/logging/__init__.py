"""Structured logging for vadseg.

Modules log through ``get_logger(__name__)``; keyword arguments become
``k=v`` fields. Detection calls run inside ``detection_pass`` so their
records carry the pass mode and elapsed time. Nothing is printed unless the
host application configures logging or calls ``setup_logging``.
"""

import logging

from vadseg.logging.structured_logger import (
    StructuredLogger,
    current_pass,
    detection_pass,
    elapsed_ms,
    get_logger,
)
from vadseg.logging.formatters import SmartFormatter, PlainFormatter, JsonFormatter
from vadseg.logging.decorator import logged
from vadseg.logging.setup import PACKAGE_LOGGER, setup_logging, teardown_logging

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())

__all__ = [
    "get_logger",
    "setup_logging",
    "teardown_logging",
    "detection_pass",
    "current_pass",
    "elapsed_ms",
    "logged",
    "StructuredLogger",
    "SmartFormatter",
    "PlainFormatter",
    "JsonFormatter",
]
