from __future__ import annotations

import logging

import structlog


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """
    Configure structlog for the application.

    JSON lines when fmt == 'json' (log aggregation), console output
    otherwise. Events below `level` are dropped.
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
    ]
    if fmt == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        # ConsoleRenderer formats exc_info itself
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        cache_logger_on_first_use=False,
    )
