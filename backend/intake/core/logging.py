"""Logging for the intake service.

Records are written to stdout in key-value form. Each one carries the HTTP
request id and, once the API layer has resolved it, the intake session id, so
a single applicant's walk through the questionnaire can be followed in the
logs.
"""

from __future__ import annotations

import logging
import logging.config
import uuid
from contextvars import ContextVar
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from intake.settings import get_settings

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
session_id_ctx_var: ContextVar[str | None] = ContextVar("intake_session_id", default=None)

LOG_FORMAT = (
    "level=%(levelname)s logger=%(name)s request_id=%(request_id)s "
    "session_id=%(session_id)s message=%(message)s"
)


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx_var.get() or "-"
        record.session_id = session_id_ctx_var.get() or "-"
        return True


def bind_session(session_id: str) -> None:
    """Tag log records from the rest of this request with ``session_id``."""
    session_id_ctx_var.set(session_id)


def _build_config(log_level: str) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"context": {"()": ContextFilter}},
        "formatters": {"kv": {"format": LOG_FORMAT}},
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "kv",
                "filters": ["context"],
                "level": log_level,
            }
        },
        # Per-request access lines duplicate what the request id already ties together
        "loggers": {"uvicorn.access": {"level": "WARNING"}},
        "root": {"handlers": ["stdout"], "level": log_level},
    }


def setup_logging(level: str | None = None) -> None:
    """Configure root logging; ``level`` overrides the LOG_LEVEL setting."""
    if level is None:
        level = get_settings().log_level
    logging.config.dictConfig(_build_config(level.upper()))


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Take ``X-Request-ID`` from the request (or mint one) and echo it back."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        token = request_id_ctx_var.set(request_id)
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            request_id_ctx_var.reset(token)


__all__ = [
    "ContextFilter",
    "RequestIdMiddleware",
    "bind_session",
    "request_id_ctx_var",
    "session_id_ctx_var",
    "setup_logging",
]
