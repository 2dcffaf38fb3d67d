"""Structured logging for the test platform.

Every line is one JSON object stamped with the service name and environment,
plus the current request id (set by the trace middleware) and account id (set
once a bearer token validates). Domain events attach their payload as
`extra={"event": {...}}` and it is emitted under the `event` key.
"""

import json
import logging
import sys
import time
from contextvars import ContextVar
from typing import Any, Dict, Optional

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


def set_request_id(rid: Optional[str]) -> None:
    _request_id.set(rid)


def set_user_id(user_id: Optional[str]) -> None:
    """Remember the authenticated account for logs written later in this request."""
    _user_id.set(user_id)


def current_context() -> Dict[str, str]:
    """The request-scoped fields known at this point (only those that are set)."""
    ctx = {"request_id": _request_id.get(), "user_id": _user_id.get()}
    return {k: v for k, v in ctx.items() if v}


class JSONFormatter(logging.Formatter):
    """Render records as single-line JSON."""

    def __init__(self, service: str = "test-platform", env: str = "dev") -> None:
        super().__init__()
        self.service = service
        self.env = env

    def format(self, record: logging.LogRecord) -> str:
        base: Dict[str, Any] = {
            "level": record.levelname,
            "ts": round(time.time(), 3),
            "service": self.service,
            "env": self.env,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        base.update(current_context())
        event = getattr(record, "event", None)
        if isinstance(event, dict):
            base["event"] = event
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def configure_logging(level: int | str = "INFO", service: str = "test-platform", env: str = "dev") -> logging.Logger:
    """Send all logging to stdout as JSON; uvicorn's loggers propagate to it.

    Returns:
        The "testplatform" application logger.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(service, env))
    logging.basicConfig(level=level, handlers=[handler], force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv = logging.getLogger(name)
        uv.handlers.clear()
        uv.propagate = True
    return logging.getLogger("testplatform")
