"""Structured logging for the business services API, built on structlog.

Every line carries the service name and, inside a request, the request_id
bound by RequestTimingMiddleware. LOG_FORMAT=json switches from the colored
console renderer to one JSON object per line; LOG_LEVEL sets the root level.
stdlib loggers (uvicorn, sqlalchemy, alembic) are routed through the same
formatter.

Usage:
    from core import get_logger
    logger = get_logger(__name__)
    logger.info("department.created", department_id=42, code="ENG")
"""

import logging
import os
import sys
from datetime import date
from decimal import Decimal
from enum import Enum

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars
from structlog.types import EventDict, Processor, WrappedLogger

__all__ = [
    "bind_contextvars",
    "clear_contextvars",
    "configure_logging",
    "get_logger",
]

DEFAULT_SERVICE_NAME = "business-services-api"

# Loggers that only speak up at WARNING and above
QUIET_LOGGERS = ("uvicorn.access", "aiosqlite", "asyncio")


def _add_service(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault(
        "service", os.environ.get("SERVICE_NAME", DEFAULT_SERVICE_NAME)
    )
    return event_dict


def _plain_values(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Money, statuses and dates as their plain text form.

    JSONRenderer would otherwise fall back to repr(), e.g. "Decimal('25.00')".
    """
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
        elif isinstance(value, Decimal):
            event_dict[key] = str(value)
        elif isinstance(value, date):
            event_dict[key] = value.isoformat()
    return event_dict


def _level_from_env() -> int:
    return logging.getLevelNamesMapping().get(
        os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO
    )


def configure_logging(
    level: int | None = None, json_output: bool | None = None
) -> None:
    """Configure structlog and the stdlib root logger. Call once at startup.

    Args:
        level: Root log level. Defaults to LOG_LEVEL, then INFO.
        json_output: Render JSON lines. Defaults to LOG_FORMAT == "json".
    """
    if level is None:
        level = _level_from_env()
    if json_output is None:
        json_output = os.environ.get("LOG_FORMAT", "").lower() == "json"

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        _add_service,
        _plain_values,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Structured logger for a module, usually ``get_logger(__name__)``."""
    return structlog.stdlib.get_logger(name)
