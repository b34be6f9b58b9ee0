"""
Structured logging setup.

Every module logs through ``structlog.get_logger(__name__)`` with an event
name and key/value context, e.g.::

    logger.info("reservation_created", reservation_id=..., loft_id=...)

Values bound with ``structlog.contextvars`` (the request ID bound by
RequestIDMiddleware) are merged into every event.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping, cast

import structlog

from loft_reservations.config import DEBUG, LOG_LEVEL

Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]

SERVICE_NAME = "loft-reservations"

# Library loggers that are chatty at INFO
QUIET_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "uvicorn.access",
)


def _add_service_name(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging() -> None:
    """
    Configure stdlib logging and structlog once at application start.

    DEBUG renders colored console output for local work; every other level
    renders one JSON object per line for log aggregation, with tracebacks
    flattened into the ``exception`` field.
    """
    logging.basicConfig(
        format="[%(asctime)s] %(levelname)s in %(name)s:%(lineno)d: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        level=LOG_LEVEL,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_service_name,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if DEBUG:
        processors.append(cast(Processor, structlog.dev.ConsoleRenderer(colors=True)))
    else:
        processors.append(structlog.processors.format_exc_info)
        processors.append(cast(Processor, structlog.processors.JSONRenderer()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
