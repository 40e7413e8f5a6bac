from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from telemetry_api.core.metrics import BATCH_SIZE, READINGS_INGESTED
from telemetry_api.db.session import run_with_db_retry
from telemetry_api.schemas.enums import TELEMETRY_FREQUENCIES
from telemetry_api.schemas.telemetry import TELEMETRY_PAYLOAD_ADAPTER
from telemetry_api.services.device_registry import get_or_create_device
from telemetry_api.services.normalizers import normalizer_for
from telemetry_api.services.readings import create_reading
from telemetry_api.utils.errors import PayloadValidationError


logger = logging.getLogger("telemetry_api.ingest")

REQUIRED_FIELDS = ("deviceId", "timestamp", "frequency", "data")
MISSING_FIELDS_MESSAGE = "Missing required fields: deviceId, timestamp, frequency, or data"


@dataclass(frozen=True)
class IngestResult:
    reading_id: int
    device_id: int
    frequency: str
    timestamp: datetime
    child_rows: int


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _envelope_problem(body: Any) -> str | None:
    if not isinstance(body, dict) or any(_is_missing(body.get(field)) for field in REQUIRED_FIELDS):
        return "missing"
    if body["frequency"] not in TELEMETRY_FREQUENCIES:
        return "frequency"
    return None


def _format_validation_error(exc: ValidationError, frequency: Any) -> str:
    parts: list[str] = []
    for error in exc.errors():
        loc = list(error.get("loc", ()))
        # Discriminated unions prefix the location with the matched tag.
        if loc and loc[0] == frequency:
            loc = loc[1:]
        path = ".".join(str(item) for item in loc) or "body"
        parts.append(f"{path}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_telemetry_payload(body: Any) -> Any:
    """Validate one submission and return the tier-specific payload model."""
    problem = _envelope_problem(body)
    if problem == "missing":
        raise PayloadValidationError(MISSING_FIELDS_MESSAGE)
    if problem == "frequency":
        raise PayloadValidationError(
            f"Invalid frequency: {body['frequency']}. Must be 'high', 'medium', or 'low'"
        )
    try:
        return TELEMETRY_PAYLOAD_ADAPTER.validate_python(body)
    except ValidationError as exc:
        raise PayloadValidationError(
            f"Invalid payload: {_format_validation_error(exc, body.get('frequency'))}"
        ) from exc


def parse_telemetry_batch(body: Any) -> list[Any]:
    """Validate every payload of a batch up front; nothing is accepted on any error."""
    payloads = body.get("payloads") if isinstance(body, dict) else None
    if not isinstance(payloads, list):
        raise PayloadValidationError("Missing or invalid payloads array")
    if not payloads:
        raise PayloadValidationError("Empty payloads array")

    errors: list[str] = []
    parsed: list[Any] = []
    for index, item in enumerate(payloads):
        problem = _envelope_problem(item)
        if problem == "missing":
            errors.append(f"Payload {index}: Missing required fields")
            continue
        if problem == "frequency":
            errors.append(f"Payload {index}: Invalid frequency '{item['frequency']}'")
            continue
        try:
            parsed.append(TELEMETRY_PAYLOAD_ADAPTER.validate_python(item))
        except ValidationError as exc:
            errors.append(
                f"Payload {index}: {_format_validation_error(exc, item.get('frequency'))}"
            )
    if errors:
        raise PayloadValidationError(
            "Validation errors: " + "; ".join(errors),
            extra={"invalid_payloads": len(errors)},
        )
    return parsed


def _store_payload(session: Session, payload: Any) -> IngestResult:
    normalize = normalizer_for(type(payload))
    device_id = get_or_create_device(session, payload.device_id)
    reading_id = create_reading(
        session,
        device_id=device_id,
        timestamp=payload.timestamp,
        timestamp_ms=payload.timestamp_ms,
        frequency=payload.frequency,
    )
    child_rows = normalize(session, reading_id, payload)
    session.flush()
    return IngestResult(
        reading_id=reading_id,
        device_id=device_id,
        frequency=payload.frequency,
        timestamp=payload.timestamp,
        child_rows=child_rows,
    )


def process_telemetry_payload(payload: Any) -> IngestResult:
    """Persist one submission: device upsert, reading and child rows in one transaction."""
    # Unknown tiers fail here, before a session is opened.
    normalizer_for(type(payload))
    result = run_with_db_retry(
        lambda session: _store_payload(session, payload),
        commit=True,
        operation_name="ingest_telemetry",
    )
    READINGS_INGESTED.labels(frequency=result.frequency).inc()
    logger.info(
        "telemetry_ingested",
        extra={
            "device_external_id": payload.device_id,
            "reading_id": result.reading_id,
            "frequency": result.frequency,
            "child_rows": result.child_rows,
        },
    )
    return result


def process_telemetry_batch(payloads: list[Any]) -> list[IngestResult]:
    """Persist payloads in order, one transaction each; the first failure propagates."""
    BATCH_SIZE.observe(len(payloads))
    for payload in payloads:
        normalizer_for(type(payload))
    results = [process_telemetry_payload(payload) for payload in payloads]
    logger.info(
        "telemetry_batch_ingested",
        extra={"received": len(results), "reading_ids": [item.reading_id for item in results]},
    )
    return results
