from __future__ import annotations

import json
import logging
from datetime import datetime

from telemetry_api.core.logging import JsonFormatter
from telemetry_api.utils.request_id import set_request_id


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("telemetry_api.ingest", logging.INFO, __file__, 1, "telemetry_ingested", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields_and_request_id() -> None:
    set_request_id("req-7")
    line = JsonFormatter(service="ppp-telemetry-server", env="test").format(
        _record(reading_id=12, frequency="high")
    )
    payload = json.loads(line)

    assert payload["message"] == "telemetry_ingested"
    assert payload["logger"] == "telemetry_api.ingest"
    assert payload["request_id"] == "req-7"
    assert payload["service"] == "ppp-telemetry-server"
    assert payload["env"] == "test"
    assert payload["reading_id"] == 12
    assert payload["frequency"] == "high"
    assert "lineno" not in payload


def test_json_formatter_renders_naive_datetimes_as_utc() -> None:
    payload = json.loads(JsonFormatter().format(_record(seen_at=datetime(2024, 1, 1, 12, 0, 0))))

    assert payload["seen_at"] == "2024-01-01T12:00:00Z"
    assert "service" not in payload
