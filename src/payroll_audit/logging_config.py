"""Logging setup shared by the API and the CLI."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Set the package log level and install a root stream handler if none exists."""
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("payroll_audit").setLevel(level)
