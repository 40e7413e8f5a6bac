from __future__ import annotations

from telemetry_api.utils.error_payloads import (
    error_payload,
    failure_classification,
    success_payload,
)
from telemetry_api.utils.request_id import set_request_id


def test_failure_classification_dependency_transient() -> None:
    assert failure_classification("db_error", "dependency") == "TRANSIENT"


def test_failure_classification_client_fatal() -> None:
    assert failure_classification("validation_error", "client") == "FATAL"


def test_error_payload_envelope() -> None:
    set_request_id("req-42")
    payload = error_payload(
        code="db_circuit_open",
        message="Database circuit open",
        classification="dependency",
    )

    assert payload["success"] is False
    assert payload["error"] == "Database circuit open"
    assert payload["failureClassification"] == "TRANSIENT"
    assert payload["requestId"] == "req-42"
    assert payload["timestamp"].endswith("Z")
    assert "extra" not in payload


def test_success_payload_wraps_data() -> None:
    payload = success_payload({"received": True})

    assert payload["success"] is True
    assert payload["data"] == {"received": True}
    assert payload["timestamp"].endswith("Z")


def test_request_id_is_trimmed_or_generated() -> None:
    assert set_request_id("  abc  ") == "abc"
    assert len(set_request_id("x" * 500)) == 128
    generated = set_request_id(None)
    assert len(generated) == 32
