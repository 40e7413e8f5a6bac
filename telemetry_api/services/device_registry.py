from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from telemetry_api.db.models import Device


_UPSERT_INSERTS: dict[str, Any] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def build_device_upsert(dialect_name: str, external_id: str, seen_at: datetime) -> Any:
    try:
        insert = _UPSERT_INSERTS[dialect_name]
    except KeyError as exc:
        raise RuntimeError(f"Device upsert is not supported on dialect '{dialect_name}'") from exc
    stmt = insert(Device).values(
        external_id=external_id,
        name=external_id,
        created_at=seen_at,
        last_seen_at=seen_at,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Device.external_id],
        set_={"last_seen_at": seen_at},
    )
    return stmt.returning(Device.id)


def get_or_create_device(
    session: Session, external_id: str, *, seen_at: datetime | None = None
) -> int:
    """Return the internal id for ``external_id``, registering it on first sight.

    A single ``INSERT .. ON CONFLICT DO UPDATE`` keeps concurrent first
    submissions from the same device down to one row.
    """
    seen_at = seen_at or datetime.now(timezone.utc)
    dialect_name = session.get_bind().dialect.name
    stmt = build_device_upsert(dialect_name, external_id, seen_at)
    return int(session.execute(stmt).scalar_one())
