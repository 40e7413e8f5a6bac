from __future__ import annotations

import random
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from threading import Lock
from typing import Any, Callable, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from telemetry_api.core.metrics import DB_CIRCUIT_OPEN, DB_COMMIT_LATENCY, DB_RETRY_COUNT
from telemetry_api.core.settings import get_settings
from telemetry_api.utils.errors import CircuitBreakerOpenError


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    # SQLite ignores ON DELETE CASCADE unless enforcement is switched on per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@lru_cache
def _get_engine_cached(
    database_url: str, pool_size: int, max_overflow: int, connect_timeout: int
) -> Engine:
    if make_url(database_url).get_backend_name() == "sqlite":
        engine = create_engine(database_url)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(
        database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,
        connect_args={"connect_timeout": connect_timeout},
    )


def _engine_key() -> tuple[str, int, int, int]:
    settings = get_settings()
    return (
        settings.database_url,
        settings.db_pool_size,
        settings.db_max_overflow,
        settings.db_connect_timeout_seconds,
    )


@lru_cache
def _get_sessionmaker(
    database_url: str, pool_size: int, max_overflow: int, connect_timeout: int
) -> sessionmaker:
    engine = _get_engine_cached(database_url, pool_size, max_overflow, connect_timeout)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_engine() -> Engine:
    return _get_engine_cached(*_engine_key())


def SessionLocal() -> Session:
    return _get_sessionmaker(*_engine_key())()


def reset_engines() -> None:
    """Dispose the engine for the current settings and drop cached factories."""
    global _circuit_breaker
    if _get_engine_cached.cache_info().currsize:
        get_engine().dispose()
    _get_sessionmaker.cache_clear()
    _get_engine_cached.cache_clear()
    _circuit_breaker = None


T = TypeVar("T")


@dataclass
class DbRetryPolicy:
    max_attempts: int
    base_delay_seconds: float
    max_delay_seconds: float

    def delay_for(self, attempt: int) -> float:
        delay = min(self.max_delay_seconds, self.base_delay_seconds * (2 ** (attempt - 1)))
        return delay * (1 + random.uniform(-0.1, 0.1))


class DbCircuitBreaker:
    def __init__(self, failure_threshold: int, recovery_seconds: int) -> None:
        self._failure_threshold = failure_threshold
        self._recovery_seconds = recovery_seconds
        self._failure_count = 0
        self._opened_until: datetime | None = None
        self._lock = Lock()

    def allow_request(self) -> bool:
        with self._lock:
            if self._opened_until is None:
                return True
            if datetime.now(timezone.utc) >= self._opened_until:
                self._opened_until = None
                self._failure_count = 0
                return True
            return False

    def record_success(self) -> None:
        with self._lock:
            self._failure_count = 0
            self._opened_until = None

    def record_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            if self._failure_count >= self._failure_threshold and self._opened_until is None:
                self._opened_until = datetime.now(timezone.utc) + timedelta(
                    seconds=self._recovery_seconds
                )
                DB_CIRCUIT_OPEN.inc()

    @property
    def state(self) -> str:
        with self._lock:
            return "open" if self._opened_until else "closed"


_circuit_breaker: DbCircuitBreaker | None = None


def get_circuit_breaker() -> DbCircuitBreaker:
    global _circuit_breaker
    if _circuit_breaker is None:
        settings = get_settings()
        _circuit_breaker = DbCircuitBreaker(
            failure_threshold=settings.db_circuit_failure_threshold,
            recovery_seconds=settings.db_circuit_recovery_seconds,
        )
    return _circuit_breaker


def _is_transient_db_error(exc: BaseException) -> bool:
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, DBAPIError) and getattr(exc, "connection_invalidated", False):
        return True
    return False


def run_with_db_retry(
    operation: Callable[[Session], T],
    *,
    commit: bool = False,
    operation_name: str = "db_operation",
) -> T:
    """Run ``operation`` inside one session and, with ``commit``, one transaction.

    Everything the operation writes is committed together or rolled back
    together. Only transient connectivity errors are retried, and only when
    ``db_retry_max_attempts`` is above one.
    """
    settings = get_settings()
    breaker = get_circuit_breaker()
    if not breaker.allow_request():
        raise CircuitBreakerOpenError()
    policy = DbRetryPolicy(
        max_attempts=max(1, settings.db_retry_max_attempts),
        base_delay_seconds=settings.db_retry_base_delay_seconds,
        max_delay_seconds=settings.db_retry_max_delay_seconds,
    )
    last_error: SQLAlchemyError | None = None
    for attempt in range(1, policy.max_attempts + 1):
        session = SessionLocal()
        try:
            result = operation(session)
            if commit:
                commit_start = time.perf_counter()
                session.commit()
                DB_COMMIT_LATENCY.observe(time.perf_counter() - commit_start)
            breaker.record_success()
            return result
        except SQLAlchemyError as exc:
            session.rollback()
            last_error = exc
            if not _is_transient_db_error(exc):
                raise
            breaker.record_failure()
            if attempt >= policy.max_attempts:
                raise
            DB_RETRY_COUNT.labels(operation=operation_name).inc()
            time.sleep(policy.delay_for(attempt))
        finally:
            session.close()
    if last_error:
        raise last_error
    raise RuntimeError("DB retry failed without exception")
