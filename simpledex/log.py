"""structlog setup for processes embedding the engine."""

import logging

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog with level filtering and console rendering.

    Args:
        level: Minimum level name (e.g. "DEBUG", "INFO", "WARNING")
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
