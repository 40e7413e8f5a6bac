from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from telemetry_api.utils.request_id import get_request_id

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
    return str(value)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, tagged with the active request id."""

    def __init__(self, service: str | None = None, env: str | None = None) -> None:
        super().__init__()
        self._static = {key: value for key, value in (("service", service), ("env", env)) if value}

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": get_request_id() or None,
            **self._static,
        }
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRIBUTES or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default)


def configure_logging(level: str, *, service: str | None = None, env: str | None = None) -> None:
    formatter = JsonFormatter(service=service, env=env)
    root = logging.getLogger()
    root.setLevel(level.upper())
    if not root.handlers:
        root.addHandler(logging.StreamHandler(sys.stdout))
    for handler in root.handlers:
        handler.setFormatter(formatter)
    # Request logging is done by the app middleware and metrics.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
