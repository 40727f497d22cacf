"""
structlog setup and per-request logging context
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[str | None] = ContextVar("user_id", default=None)


def add_request_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor stamping the current request and caller onto each event."""
    _ = logger, method_name
    for key, var in (("request_id", request_id_ctx), ("user_id", user_id_ctx)):
        value = var.get()
        if value:
            event_dict.setdefault(key, value)
    return event_dict


def configure_logging(debug: bool = False, level: str | None = None) -> None:
    """Configure structlog on top of the stdlib root logger.

    Args:
        debug: Render colored console output instead of JSON lines
        level: Level name; DEBUG in debug mode and INFO otherwise when omitted
    """
    if level is not None:
        log_level = logging.getLevelName(level.upper())
    else:
        log_level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s", force=True)

    renderer = (
        structlog.dev.ConsoleRenderer(colors=True)
        if debug
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_request_context,
            structlog.processors.TimeStamper(fmt="ISO", utc=True),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def start_request(request_id: str | None = None) -> str:
    """Open the logging context of one request and return its id."""
    request_id = request_id or uuid.uuid4().hex[:16]
    request_id_ctx.set(request_id)
    user_id_ctx.set(None)
    return request_id


def bind_user_id(user_id: str | None) -> None:
    """Attach the resolved caller to the current logging context."""
    user_id_ctx.set(user_id)


def end_request() -> None:
    request_id_ctx.set(None)
    user_id_ctx.set(None)
