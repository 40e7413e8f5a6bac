from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, status
from fastapi.responses import JSONResponse

from telemetry_api.core.metrics import INGEST_FAILURES, INGEST_REQUESTS
from telemetry_api.schemas.telemetry import BatchTelemetryAck, TelemetryAck
from telemetry_api.services.ingest import (
    parse_telemetry_batch,
    parse_telemetry_payload,
    process_telemetry_batch,
    process_telemetry_payload,
)
from telemetry_api.utils.error_payloads import success_payload, utc_timestamp


router = APIRouter(tags=["telemetry"])


@router.post("/telemetry", status_code=status.HTTP_201_CREATED)
def ingest_telemetry(body: Any = Body(default=None)) -> JSONResponse:
    INGEST_REQUESTS.labels(endpoint="telemetry").inc()
    try:
        payload = parse_telemetry_payload(body)
        result = process_telemetry_payload(payload)
    except Exception:
        INGEST_FAILURES.labels(endpoint="telemetry").inc()
        raise
    ack = TelemetryAck(id=str(result.reading_id), timestamp=utc_timestamp(result.timestamp))
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=success_payload(ack.model_dump(by_alias=True)),
    )


@router.post("/telemetry/batch", status_code=status.HTTP_201_CREATED)
def ingest_telemetry_batch(body: Any = Body(default=None)) -> JSONResponse:
    INGEST_REQUESTS.labels(endpoint="telemetry_batch").inc()
    try:
        payloads = parse_telemetry_batch(body)
        results = process_telemetry_batch(payloads)
    except Exception:
        INGEST_FAILURES.labels(endpoint="telemetry_batch").inc()
        raise
    ack = BatchTelemetryAck(
        received=len(results),
        failed=0,
        ids=[str(item.reading_id) for item in results],
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=success_payload(ack.model_dump(by_alias=True)),
    )
