"""Structured logging configuration using structlog.

Every entry carries the service name, the deployment environment and,
inside a request, the correlation id and the authenticated user id.
Credential fields are masked before rendering.
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from structlog.types import EventDict, Processor

# Keys never written out in clear text
SENSITIVE_KEYS = frozenset({"password", "token", "authorization", "cookie", "jwt_secret_key"})
MASK = "***"

_service_fields: Dict[str, str] = {"service": "plannora", "environment": "development"}


def add_service_fields(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp the service name and environment on an entry unless already set."""
    for key, value in _service_fields.items():
        event_dict.setdefault(key, value)
    return event_dict


def mask_sensitive_fields(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace the value of credential-like keys with a mask.

    Args:
        logger: The logger instance
        method_name: The logging method name
        event_dict: The event dictionary

    Returns:
        Event dictionary safe to render
    """
    for key in list(event_dict):
        if key.lower() in SENSITIVE_KEYS and event_dict[key] is not None:
            event_dict[key] = MASK
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: Optional[str] = None,
    environment: Optional[str] = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_logs: JSON lines when true, the console renderer otherwise
        service_name: Value of the ``service`` field
        environment: Value of the ``environment`` field
    """
    if service_name:
        _service_fields["service"] = service_name
    if environment:
        _service_fields["environment"] = environment

    renderer: Processor = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_service_fields,
        mask_sensitive_fields,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
        force=True,
    )
    # uvicorn's access log duplicates request_completed
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every entry logged in the current request or task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
