"""
structlog setup for applications embedding safe_result.

The library logs through the standard `logging` module under the
"safe_result" logger (retries, timeouts, failing hooks, all at DEBUG) and
never configures logging on import, so it stays silent by default.

Applications opt in once at startup:

    configure_structlog()                    # level from SAFE_LOG_LEVEL
    configure_structlog("DEBUG", json=True)  # explicit level, JSON lines

This configures structlog for the application's own loggers and attaches a
structlog-rendered handler to the "safe_result" logger, so library records
come out in the same format.
"""

from __future__ import annotations

import logging

import structlog

from safe_result.config import SafeSettings

LIBRARY_LOGGER = "safe_result"


def _library_handler(renderer: structlog.types.Processor) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
            ],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    handler.set_name("safe_result.structlog")
    return handler


def configure_structlog(log_level: str | None = None, *, json: bool = False) -> None:
    """
    Configure structlog for structured logging.

    In production: JSON lines (machine-readable).
    In development: colored, human-readable console output.

    `log_level` defaults to SafeSettings().log_level (SAFE_LOG_LEVEL).
    Calling it again replaces the previous library handler.
    """
    level_name = (log_level or SafeSettings().log_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    for handler in list(library_logger.handlers):
        if handler.get_name() == "safe_result.structlog":
            library_logger.removeHandler(handler)
    library_logger.addHandler(_library_handler(renderer))
    library_logger.setLevel(level)
