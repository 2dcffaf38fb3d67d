"""Request tracing and domain events.

`trace_middleware` gives every request a correlation id (taken from
`X-Request-ID` or generated), echoes it back and writes one access line with
status and latency. `xapi_event` records actor/verb/object events such as
`registered`, `logged_in` and `submitted`.
"""

import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Dict

from fastapi import Request, Response

from .logging import set_request_id

access_log = logging.getLogger("testplatform.access")
event_log = logging.getLogger("testplatform.events")


async def trace_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    set_request_id(rid)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        access_log.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms}ms")
        response.headers["X-Request-ID"] = rid
        return response
    finally:
        set_request_id(None)


def xapi_event(actor_id: str, verb: str, obj: str, **extras: Any) -> Dict[str, Any]:
    """Log an actor/verb/object event and return its payload.

    The payload rides on the record as `event`, so the JSON formatter emits it
    as structured fields rather than inside the message text.
    """
    event: Dict[str, Any] = {
        "actor": actor_id,
        "verb": verb,
        "object": obj,
        "ts": round(time.time(), 3),
        "extras": extras,
    }
    event_log.info(f"{actor_id} {verb} {obj}", extra={"event": event})
    return event
