from __future__ import annotations

import uuid
from contextvars import ContextVar

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 128

_request_id: ContextVar[str] = ContextVar("telemetry_request_id", default="")


def set_request_id(value: str | None = None) -> str:
    """Bind the request id for the current context.

    Client supplied ids are trimmed and truncated; a blank header gets a
    fresh uuid4 hex id.
    """
    request_id = (value or "").strip()[:MAX_REQUEST_ID_LENGTH] or uuid.uuid4().hex
    _request_id.set(request_id)
    return request_id


def get_request_id() -> str:
    return _request_id.get()
