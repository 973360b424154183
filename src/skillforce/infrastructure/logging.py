"""Structured logging setup shared by the CLI and the API."""

import logging

import structlog


def configure_logging(debug: bool = False, json_logs: bool = False) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        debug: Log at DEBUG instead of WARNING
        json_logs: Render events as JSON lines instead of console output
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(level=level, format="%(message)s")

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
