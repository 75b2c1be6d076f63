"""Structured logging for the ladder engine.

Two renderers:
- JSON lines for the web application that hosts the engine
- console output for local runs and tests
"""

import logging
from typing import Optional

import structlog
from structlog.processors import (
    JSONRenderer,
    StackInfoRenderer,
    TimeStamper,
    add_log_level,
    format_exc_info,
)


def configure_logging(json_mode: bool = False, log_level: str = "INFO") -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso"),
        StackInfoRenderer(),
        format_exc_info,
    ]

    if json_mode:
        renderer = JSONRenderer()
    else:
        from structlog.dev import ConsoleRenderer
        renderer = ConsoleRenderer(colors=False)

    processors.append(renderer)

    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
