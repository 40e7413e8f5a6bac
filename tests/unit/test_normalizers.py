from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import get_args

import pytest
from sqlalchemy import Text, func, select
from sqlalchemy.exc import IntegrityError

from telemetry_api.db.models import (
    TIER_TABLES,
    CoolingDeviceReading,
    CpuFrequencyReading,
    CpuTimeReading,
    Device,
    MemoryReading,
    NetworkSummaryReading,
    ProcessReading,
    StorageDeviceReading,
    TelemetryReading,
    ThermalZoneReading,
)
from telemetry_api.db.session import run_with_db_retry
from telemetry_api.schemas.enums import TELEMETRY_FREQUENCIES
from telemetry_api.schemas.telemetry import BlockDeviceTelemetry, TelemetryPayload
from telemetry_api.services import normalizers
from telemetry_api.services.ingest import parse_telemetry_payload, process_telemetry_payload
from tests.utils.payloads import block_device, high_payload, low_payload, medium_payload


NOW = datetime.now(timezone.utc).replace(microsecond=0)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _count(model, reading_id: int) -> int:
    return run_with_db_retry(
        lambda session: session.execute(
            select(func.count()).select_from(model).where(model.reading_id == reading_id)
        ).scalar_one()
    )


def _ingest(body: dict) -> int:
    return process_telemetry_payload(parse_telemetry_payload(body)).reading_id


def test_every_tier_has_a_normalizer() -> None:
    union = get_args(get_args(TelemetryPayload)[0])
    by_frequency = {get_args(model.model_fields["frequency"].annotation)[0]: model for model in union}

    assert set(by_frequency) == set(TELEMETRY_FREQUENCIES)
    for frequency in TELEMETRY_FREQUENCIES:
        assert callable(normalizers.normalizer_for(by_frequency[frequency]))


def test_unregistered_payload_type_is_rejected() -> None:
    with pytest.raises(normalizers.UnsupportedTierError):
        normalizers.normalizer_for(dict)


@pytest.mark.parametrize(
    ("frequency", "builder"),
    [("high", high_payload), ("medium", medium_payload), ("low", low_payload)],
)
def test_tier_populates_only_its_own_tables(database: str, frequency: str, builder) -> None:
    before = datetime.now(timezone.utc) - timedelta(seconds=1)
    reading_id = _ingest(builder("dev-1", NOW))

    reading = run_with_db_retry(lambda session: session.get(TelemetryReading, reading_id))
    device = run_with_db_retry(lambda session: session.get(Device, reading.device_id))
    assert reading.frequency == frequency
    assert _as_utc(device.last_seen_at) >= before

    for tier, tables in TIER_TABLES.items():
        for model in tables:
            if tier == frequency:
                assert _count(model, reading_id) >= 1, model.__tablename__
            else:
                assert _count(model, reading_id) == 0, model.__tablename__


def test_high_tier_fans_out_arrays(database: str) -> None:
    reading_id = _ingest(high_payload("dev-1", NOW))

    assert _count(ThermalZoneReading, reading_id) == 2
    assert _count(CoolingDeviceReading, reading_id) == 1
    assert _count(CpuFrequencyReading, reading_id) == 2
    assert _count(CpuTimeReading, reading_id) == 3

    memory = run_with_db_retry(
        lambda session: session.execute(
            select(MemoryReading).where(MemoryReading.reading_id == reading_id)
        ).scalar_one()
    )
    summary = run_with_db_retry(
        lambda session: session.execute(
            select(NetworkSummaryReading).where(NetworkSummaryReading.reading_id == reading_id)
        ).scalar_one()
    )
    assert memory.s_reclaimable == 60000000
    assert summary.wifi_ssid == "lab-net"
    assert summary.wifi_noise_level is None


def test_missing_wifi_leaves_nullable_columns_empty(database: str) -> None:
    body = high_payload("dev-1", NOW)
    del body["data"]["network"]["wifi"]
    reading_id = _ingest(body)

    summary = run_with_db_retry(
        lambda session: session.execute(
            select(NetworkSummaryReading).where(NetworkSummaryReading.reading_id == reading_id)
        ).scalar_one()
    )
    assert summary.total_rx_bytes == 1048576
    assert summary.wifi_signal_strength is None
    assert summary.wifi_ssid is None


def test_storage_partitions_reference_their_parent(database: str) -> None:
    devices = [
        block_device(
            "mmcblk0",
            partitions=[block_device("mmcblk0p1"), block_device("mmcblk0p2")],
        )
    ]
    reading_id = _ingest(medium_payload("dev-1", NOW, devices=devices))

    rows = run_with_db_retry(
        lambda session: session.execute(
            select(StorageDeviceReading)
            .where(StorageDeviceReading.reading_id == reading_id)
            .order_by(StorageDeviceReading.id)
        )
        .scalars()
        .all()
    )

    assert len(rows) == 3
    root = next(row for row in rows if row.parent_device_id is None)
    children = [row for row in rows if row.parent_device_id is not None]
    assert root.name == "mmcblk0"
    assert root.depth == 0
    assert [child.parent_device_id for child in children] == [root.id, root.id]
    assert sorted(child.path for child in children) == ["mmcblk0/mmcblk0p1", "mmcblk0/mmcblk0p2"]
    assert {child.depth for child in children} == {1}


def test_storage_walk_handles_deep_nesting() -> None:
    stats = block_device("x")["stats"]
    node = BlockDeviceTelemetry.model_validate(block_device("leaf"))
    for level in range(3000):
        node = BlockDeviceTelemetry(
            name=f"n{level}",
            type="other",
            size=0,
            stats=stats,
            bytes_read=0,
            bytes_written=0,
            partitions=[node],
        )

    rows = normalizers.build_storage_device_rows(1, [node])

    assert len(rows) == 3001
    assert rows[0].parent is None
    assert rows[-1].name == "leaf"
    assert rows[-1].depth == 3000
    assert rows[-1].parent is rows[-2]


def _long_name_tree(levels: int) -> dict:
    node = block_device("p" * 100)
    for level in range(levels - 1):
        node = block_device(f"{level:02d}".ljust(100, "d"), partitions=[node])
    return node


def test_storage_path_column_holds_long_nested_paths() -> None:
    payload = parse_telemetry_payload(medium_payload("dev-1", NOW, devices=[_long_name_tree(12)]))

    rows = normalizers.build_storage_device_rows(1, payload.data.storage.devices)
    path_type = StorageDeviceReading.__table__.c.path.type

    assert len(rows) == 12
    assert max(len(row.path) for row in rows) == 12 * 100 + 11
    assert isinstance(path_type, Text)
    assert path_type.length is None


def test_storage_walk_keeps_sibling_order() -> None:
    root = BlockDeviceTelemetry.model_validate(
        block_device(
            "mmcblk0",
            partitions=[
                block_device("p1", partitions=[block_device("p1a")]),
                block_device("p2"),
            ],
        )
    )
    second = BlockDeviceTelemetry.model_validate(block_device("zram0", device_type="zram"))

    rows = normalizers.build_storage_device_rows(7, [root, second])

    assert [row.path for row in rows] == [
        "mmcblk0",
        "mmcblk0/p1",
        "mmcblk0/p1/p1a",
        "mmcblk0/p2",
        "zram0",
    ]
    assert all(row.reading_id == 7 for row in rows)


def test_failed_child_insert_rolls_back_whole_submission(
    database: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _broken_memory_rows(reading_id, data):
        return [MemoryReading(reading_id=reading_id)]

    monkeypatch.setattr(normalizers, "_memory_rows", _broken_memory_rows)

    with pytest.raises(IntegrityError):
        _ingest(high_payload("dev-1", NOW))

    counts = run_with_db_retry(
        lambda session: [
            session.execute(select(func.count()).select_from(model)).scalar_one()
            for model in (Device, TelemetryReading, ThermalZoneReading, ProcessReading)
        ]
    )
    assert counts == [0, 0, 0, 0]
