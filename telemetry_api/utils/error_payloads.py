from __future__ import annotations

from datetime import datetime, timezone

from telemetry_api.utils.request_id import get_request_id


def failure_classification(code: str, classification: str) -> str:
    if classification in {"dependency", "transient"}:
        return "TRANSIENT"
    if code in {"db_error", "db_circuit_open"}:
        return "TRANSIENT"
    return "FATAL"


def utc_timestamp(value: datetime | None = None) -> str:
    value = value or datetime.now(timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def success_payload(data: object) -> dict:
    return {"success": True, "data": data, "timestamp": utc_timestamp()}


def error_payload(
    *,
    code: str,
    message: str,
    classification: str,
    extra: dict | None = None,
) -> dict:
    payload: dict[str, object] = {
        "success": False,
        "error": message,
        "code": code,
        "classification": classification,
        "failureClassification": failure_classification(code, classification),
        "requestId": get_request_id() or None,
        "timestamp": utc_timestamp(),
    }
    if extra:
        payload["extra"] = extra
    return payload
