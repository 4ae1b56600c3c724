"""Logging module for Spatium."""

from spatium.logging.setup import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
