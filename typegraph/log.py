"""Logging setup.

Modules log through loguru's shared ``logger``.  Every discovered
declaration, member and edge is traced at ``DEBUG``; skipped files are
reported at ``WARNING``.  Only the command line installs a sink.
"""

from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan> - {message}"


def configure_logging(debug: bool = False) -> None:
    """Send log records to stderr, at ``DEBUG`` or ``WARNING`` level.

    Standard output stays reserved for the diagram.
    """
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "WARNING", format=LOG_FORMAT)
