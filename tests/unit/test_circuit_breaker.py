from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from telemetry_api.db import session as db_session
from telemetry_api.db.session import DbCircuitBreaker, run_with_db_retry
from telemetry_api.utils.errors import CircuitBreakerOpenError


def test_circuit_breaker_opens() -> None:
    breaker = DbCircuitBreaker(failure_threshold=2, recovery_seconds=30)
    assert breaker.allow_request()
    breaker.record_failure()
    assert breaker.allow_request()
    breaker.record_failure()
    assert not breaker.allow_request()
    assert breaker.state == "open"


def test_circuit_breaker_success_resets_count() -> None:
    breaker = DbCircuitBreaker(failure_threshold=2, recovery_seconds=30)
    breaker.record_failure()
    breaker.record_success()
    breaker.record_failure()

    assert breaker.allow_request()
    assert breaker.state == "closed"


def test_circuit_breaker_closes_after_recovery() -> None:
    breaker = DbCircuitBreaker(failure_threshold=1, recovery_seconds=0)
    breaker.record_failure()

    assert breaker.allow_request()
    assert breaker.state == "closed"


def test_open_breaker_rejects_without_touching_the_database(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    breaker = DbCircuitBreaker(failure_threshold=1, recovery_seconds=60)
    breaker.record_failure()
    monkeypatch.setattr(db_session, "get_circuit_breaker", lambda: breaker)

    def _never(session):
        raise AssertionError("operation should not run")

    with pytest.raises(CircuitBreakerOpenError) as exc:
        run_with_db_retry(_never)

    assert exc.value.detail.status_code == 503


def test_operation_is_not_retried_by_default(database: str) -> None:
    calls = []

    def _flaky(session):
        calls.append(1)
        raise OperationalError("SELECT 1", {}, Exception("connection reset"))

    with pytest.raises(OperationalError):
        run_with_db_retry(_flaky)

    assert calls == [1]


def test_integrity_errors_do_not_trip_the_breaker(
    database: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    breaker = DbCircuitBreaker(failure_threshold=1, recovery_seconds=60)
    monkeypatch.setattr(db_session, "get_circuit_breaker", lambda: breaker)

    def _conflict(session):
        raise IntegrityError("INSERT", {}, Exception("duplicate key"))

    with pytest.raises(IntegrityError):
        run_with_db_retry(_conflict)

    assert breaker.state == "closed"


def test_transient_errors_are_retried_when_enabled(
    database: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("DB_RETRY_MAX_ATTEMPTS", "3")
    monkeypatch.setenv("DB_RETRY_BASE_DELAY_SECONDS", "0")
    db_session.get_settings.cache_clear()
    monkeypatch.setattr(db_session.time, "sleep", lambda _: None)
    calls = []

    def _recovering(session):
        calls.append(1)
        if len(calls) < 3:
            raise OperationalError("SELECT 1", {}, Exception("connection reset"))
        return "ok"

    assert run_with_db_retry(_recovering) == "ok"
    assert len(calls) == 3


class _FakeEngine:
    def dispose(self) -> None:
        pass


def test_postgres_engine_gets_connect_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    db_session.reset_engines()
    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://u:p@db.invalid:5432/telemetry")
    monkeypatch.setenv("DB_CONNECT_TIMEOUT_SECONDS", "2")
    db_session.get_settings.cache_clear()
    created = []

    def _create_engine(url, **kwargs):
        created.append((url, kwargs))
        return _FakeEngine()

    monkeypatch.setattr(db_session, "create_engine", _create_engine)
    try:
        db_session.get_engine()
    finally:
        db_session.reset_engines()
        db_session.get_settings.cache_clear()

    assert len(created) == 1
    _, kwargs = created[0]
    assert kwargs["connect_args"] == {"connect_timeout": 2}
    assert kwargs["pool_pre_ping"] is True
