from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from telemetry_api.api import telemetry as telemetry_routes
from telemetry_api.db.models import Device, TelemetryReading
from telemetry_api.db.session import run_with_db_retry
from telemetry_api.main import create_app
from tests.utils.payloads import high_payload, low_payload, medium_payload


NOW = datetime.now(timezone.utc).replace(microsecond=0)


def _count(model) -> int:
    return run_with_db_retry(
        lambda session: session.execute(select(func.count()).select_from(model)).scalar_one()
    )


@pytest.mark.anyio
async def test_single_submission_is_acknowledged(database: str) -> None:
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/api/telemetry", json=high_payload("dev-1", NOW))

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["received"] is True
    assert body["data"]["id"].isdigit()
    assert body["data"]["timestamp"] == NOW.isoformat().replace("+00:00", "Z")
    assert "timestamp" in body
    assert response.headers["X-Request-Id"]
    assert _count(TelemetryReading) == 1


@pytest.mark.anyio
async def test_missing_fields_return_400(database: str) -> None:
    body = low_payload("dev-1", NOW)
    body.pop("data")
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/api/telemetry", json=body)

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["error"] == "Missing required fields: deviceId, timestamp, frequency, or data"
    assert payload["code"] == "validation_error"
    assert payload["failureClassification"] == "FATAL"


@pytest.mark.anyio
async def test_unknown_frequency_writes_nothing(database: str) -> None:
    body = low_payload("dev-1", NOW)
    body["frequency"] = "ultra"
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/api/telemetry", json=body)

    assert response.status_code == 400
    assert "Invalid frequency: ultra" in response.json()["error"]
    assert _count(TelemetryReading) == 0
    assert _count(Device) == 0


@pytest.mark.anyio
async def test_invalid_json_returns_400(database: str) -> None:
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            "/api/telemetry",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid JSON body"


@pytest.mark.anyio
async def test_request_id_is_echoed(database: str) -> None:
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            "/api/telemetry", json={}, headers={"X-Request-Id": "req-123"}
        )

    assert response.status_code == 400
    assert response.headers["X-Request-Id"] == "req-123"
    assert response.json()["requestId"] == "req-123"


@pytest.mark.anyio
async def test_batch_of_k_payloads(database: str) -> None:
    payloads = [
        high_payload("dev-1", NOW - timedelta(minutes=2)),
        medium_payload("dev-1", NOW - timedelta(minutes=1)),
        low_payload("dev-1", NOW),
    ]
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/api/telemetry/batch", json={"payloads": payloads})

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["received"] == 3
    assert data["failed"] == 0
    assert data["errors"] == []
    assert len(data["ids"]) == 3
    assert len(set(data["ids"])) == 3
    assert _count(TelemetryReading) == 3
    assert _count(Device) == 1


@pytest.mark.anyio
async def test_batch_with_invalid_payload_accepts_nothing(database: str) -> None:
    bad = low_payload("dev-1", NOW)
    bad["frequency"] = "ultra"
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            "/api/telemetry/batch", json={"payloads": [low_payload("dev-1", NOW), bad]}
        )

    assert response.status_code == 400
    assert response.json()["error"] == "Validation errors: Payload 1: Invalid frequency 'ultra'"
    assert _count(TelemetryReading) == 0


@pytest.mark.anyio
async def test_empty_batch_is_rejected(database: str) -> None:
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/api/telemetry/batch", json={"payloads": []})

    assert response.status_code == 400
    assert response.json()["error"] == "Empty payloads array"


@pytest.mark.anyio
async def test_database_error_surfaces_as_500(
    database: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _fail(payload):
        raise OperationalError("INSERT", {}, Exception("connection refused"))

    monkeypatch.setattr(telemetry_routes, "process_telemetry_payload", _fail)
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/api/telemetry", json=low_payload("dev-1", NOW))

    assert response.status_code == 500
    payload = response.json()
    assert payload["success"] is False
    assert payload["code"] == "db_error"
    assert "connection refused" in payload["error"]


@pytest.mark.anyio
async def test_batch_stops_at_first_failure(
    database: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    from telemetry_api.services import ingest

    real_process = ingest.process_telemetry_payload
    calls = []

    def _fail_second(payload):
        calls.append(payload.frequency)
        if len(calls) == 2:
            raise RuntimeError("store went away")
        return real_process(payload)

    monkeypatch.setattr(ingest, "process_telemetry_payload", _fail_second)
    payloads = [low_payload("dev-1", NOW), high_payload("dev-1", NOW), medium_payload("dev-1", NOW)]
    app = create_app()
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/telemetry/batch", json={"payloads": payloads})

    assert response.status_code == 500
    assert response.json()["error"] == "store went away"
    assert calls == ["low", "high"]
    assert _count(TelemetryReading) == 1
