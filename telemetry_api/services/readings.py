from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from telemetry_api.db.models import TelemetryReading


def create_reading(
    session: Session,
    *,
    device_id: int,
    timestamp: datetime,
    timestamp_ms: int,
    frequency: str,
) -> int:
    reading = TelemetryReading(
        device_id=device_id,
        timestamp=timestamp,
        timestamp_ms=timestamp_ms,
        frequency=frequency,
    )
    session.add(reading)
    session.flush()
    return reading.id
