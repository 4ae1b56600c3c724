"""
Structured logging setup for Spatium.

The math modules only emit debug-level events when they fall back on a
degenerate input (singular matrix, zero-length axis). Applications opt in
by calling configure_logging(); without it structlog's defaults apply.
"""

import logging
import sys
from typing import Any, Optional, TextIO

import structlog
from structlog.types import Processor


def configure_logging(
    level: str = "WARNING",
    run_id: Optional[str] = None,
    json_format: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structured logging for Spatium and the host application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        run_id: Optional run identifier added to every event.
        json_format: If True, render one JSON object per event.
        stream: Output stream. Defaults to stderr so command output on
            stdout stays machine-readable.
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=numeric_level,
        force=True,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if run_id:
        shared_processors.insert(0, _add_run_id(run_id))

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def _add_run_id(run_id: str) -> Processor:
    """Create processor that tags every event with the run identifier."""

    def processor(
        logger: Any,
        method_name: str,
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        event_dict.setdefault("run_id", run_id)
        return event_dict

    return processor


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name, usually the calling module's ``__name__``.

    Returns:
        Bound logger instance.
    """
    return structlog.get_logger(name)
