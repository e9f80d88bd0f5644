"""structlog configuration for scripts and local runs."""

import logging

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog with timestamps and console rendering.

    Args:
        level: Minimum log level name (DEBUG, INFO, WARNING, ...)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
    )
