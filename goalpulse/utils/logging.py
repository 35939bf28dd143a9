"""
structlog setup for the GoalPulse engine and API.

Engine modules log snake_case events with keyword context; the API binds a
request id into the contextvars so every event emitted while serving a
request carries it.
"""

import logging
import math
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from goalpulse import __version__
from goalpulse.config import get_settings

SERVICE_NAME = "goalpulse"


def add_service(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every event with the service name and version."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def add_severity(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["severity"] = method_name.upper()
    return event_dict


def drop_non_finite(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Replace NaN/inf floats with None.

    Window statistics over fewer than two points carry a NaN mean; the JSON
    renderer would otherwise emit invalid JSON for them.
    """
    for key, value in event_dict.items():
        if isinstance(value, float) and not math.isfinite(value):
            event_dict[key] = None
    return event_dict


def configure_logging() -> None:
    """
    Configure structlog over the stdlib logging module.

    JSON lines in production, a colored console renderer in dev mode.
    """
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # Request tracing already logs one event per request
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))

    if settings.log_format == "json" and not settings.dev_mode:
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=not settings.testing)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            add_service,
            add_severity,
            drop_non_finite,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Return a module logger; pass ``__name__``."""
    return structlog.get_logger(name)


def log_event(
    logger: structlog.stdlib.BoundLogger,
    level: str,
    event: str,
    **kwargs: Any,
) -> None:
    """
    Emit ``event`` at a level chosen at runtime.

    Unknown level names fall back to info.
    """
    log_func = getattr(logger, level.lower(), logger.info)
    log_func(event, **kwargs)
