"""
Logging configuration using structlog for structured logging.

Log events go to stderr so stdout only carries what the commands print (the
run summary, extracted references). JSON is the default because Actions
logs are easier to search that way; the console renderer is for local runs.
"""

import sys
from typing import Any, TextIO

import structlog


def _renderer_chain(json_output: bool) -> list[Any]:
    if json_output:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    # ConsoleRenderer formats exc_info itself
    return [structlog.dev.ConsoleRenderer()]


def configure_logging(log_level: str = "INFO", json_output: bool = True, stream: TextIO | None = None) -> None:
    """Configure structured logging.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines instead of human-readable console output
        stream: Where events are written; defaults to stderr
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            *_renderer_chain(json_output),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=True,
    )
