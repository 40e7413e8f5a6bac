from __future__ import annotations

from prometheus_client import Counter, Histogram


REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "http_request_latency_seconds",
    "HTTP request latency",
    ["path"],
)

ERROR_COUNT = Counter(
    "error_total",
    "Structured error responses",
    ["code", "classification"],
)

INGEST_REQUESTS = Counter(
    "telemetry_ingest_requests_total",
    "Telemetry ingest requests",
    ["endpoint"],
)

INGEST_FAILURES = Counter(
    "telemetry_ingest_failures_total",
    "Failed telemetry ingest requests",
    ["endpoint"],
)

READINGS_INGESTED = Counter(
    "telemetry_readings_ingested_total",
    "Telemetry readings committed",
    ["frequency"],
)

BATCH_SIZE = Histogram(
    "telemetry_batch_size",
    "Payloads per batch submission",
    buckets=(1, 5, 10, 25, 50, 100, 250, 500, 1000),
)

DASHBOARD_REQUESTS = Counter(
    "dashboard_requests_total",
    "Dashboard endpoint requests",
)

DB_RETRY_COUNT = Counter(
    "db_retry_total",
    "Database retry attempts",
    ["operation"],
)

DB_CIRCUIT_OPEN = Counter(
    "db_circuit_open_total",
    "Database circuit breaker open events",
)

DB_COMMIT_LATENCY = Histogram(
    "db_commit_latency_seconds",
    "Database commit latency",
)
