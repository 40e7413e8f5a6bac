from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from telemetry_api.core.settings import get_settings
from telemetry_api.db.models import (
    BatteryReading,
    CpuLoadReading,
    Device,
    DisplayReading,
    GpuReading,
    MemoryReading,
    NetworkSummaryReading,
    ProcessReading,
    TelemetryReading,
    ThermalSummaryReading,
)
from telemetry_api.db.session import run_with_db_retry
from telemetry_api.schemas.dashboard import (
    BatteryPoint,
    CpuLoadPoint,
    DashboardData,
    DashboardDevice,
    GpuInfo,
    MemoryPoint,
    NetworkStats,
    SystemInfo,
    ThermalPoint,
    TopProcess,
)


logger = logging.getLogger("telemetry_api.dashboard")


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _device_view(device: Device) -> DashboardDevice:
    return DashboardDevice(
        id=device.id,
        device_id=device.external_id,
        name=device.name,
        last_seen_at=_ensure_utc(device.last_seen_at),
    )


def _latest_reading_id(session: Session, device_id: int, frequency: str) -> int | None:
    stmt = (
        select(TelemetryReading.id)
        .where(TelemetryReading.device_id == device_id)
        .where(TelemetryReading.frequency == frequency)
        .order_by(desc(TelemetryReading.timestamp), desc(TelemetryReading.id))
        .limit(1)
    )
    return session.execute(stmt).scalar_one_or_none()


def _windowed(session: Session, model: Any, window: Any) -> list[tuple[datetime, Any]]:
    """Child rows of ``model`` joined to the reading window, oldest first."""
    stmt = (
        select(model, window.c.timestamp)
        .join(window, model.reading_id == window.c.id)
        .order_by(window.c.timestamp.asc(), window.c.id.asc())
    )
    return [(_ensure_utc(ts), row) for row, ts in session.execute(stmt).all()]


def _top_processes(session: Session, reading_id: int | None, limit: int) -> list[TopProcess]:
    if reading_id is None:
        return []
    stmt = (
        select(ProcessReading)
        .where(ProcessReading.reading_id == reading_id)
        .order_by(desc(ProcessReading.memory_percent), ProcessReading.pid)
        .limit(limit)
    )
    return [
        TopProcess(
            pid=process.pid,
            name=process.name,
            cpu_percent=process.cpu_percent,
            memory_percent=process.memory_percent,
            state=process.state,
            cmdline=process.cmdline,
        )
        for process in session.execute(stmt).scalars()
    ]


def _gpu_info(session: Session, reading_id: int | None) -> GpuInfo | None:
    if reading_id is None:
        return None
    gpu = session.execute(
        select(GpuReading).where(GpuReading.reading_id == reading_id)
    ).scalar_one_or_none()
    if gpu is None:
        return None
    return GpuInfo(
        current_freq=gpu.current_freq,
        governor=gpu.governor,
        min_freq=gpu.min_freq,
        max_freq=gpu.max_freq,
    )


def _display_brightness(session: Session, device_id: int) -> float | None:
    reading_id = _latest_reading_id(session, device_id, "low")
    if reading_id is None:
        return None
    return session.execute(
        select(DisplayReading.brightness_percent).where(DisplayReading.reading_id == reading_id)
    ).scalar_one_or_none()


def _network_stats(session: Session, window: Any) -> NetworkStats | None:
    # Newest windowed reading that has a summary row; medium and low readings never do.
    stmt = (
        select(NetworkSummaryReading)
        .join(window, NetworkSummaryReading.reading_id == window.c.id)
        .order_by(window.c.timestamp.desc(), window.c.id.desc())
        .limit(1)
    )
    summary = session.execute(stmt).scalar_one_or_none()
    if summary is None:
        return None
    return NetworkStats(
        total_rx_bytes=summary.total_rx_bytes,
        total_tx_bytes=summary.total_tx_bytes,
        wifi_signal=summary.wifi_signal_strength,
        wifi_ssid=summary.wifi_ssid,
    )


def build_dashboard(
    session: Session,
    *,
    device_external_id: str | None,
    hours: int,
    limit: int,
    now: datetime | None = None,
) -> DashboardData:
    settings = get_settings()
    devices = list(
        session.execute(
            select(Device).order_by(desc(Device.last_seen_at), desc(Device.id))
        ).scalars()
    )
    if not devices:
        return DashboardData()

    selected = next(
        (device for device in devices if device.external_id == device_external_id),
        devices[0],
    )
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(hours=hours)
    window = (
        select(TelemetryReading.id, TelemetryReading.timestamp)
        .where(TelemetryReading.device_id == selected.id)
        .where(TelemetryReading.timestamp >= cutoff)
        .where(TelemetryReading.timestamp <= now)
        .order_by(desc(TelemetryReading.timestamp), desc(TelemetryReading.id))
        .limit(limit)
        .subquery("reading_window")
    )

    battery = [
        BatteryPoint(
            timestamp=ts,
            capacity=row.capacity,
            voltage=row.voltage,
            current=row.current,
            temperature=row.temperature,
            status=row.status,
            health=row.health,
        )
        for ts, row in _windowed(session, BatteryReading, window)
    ]
    thermal = [
        ThermalPoint(
            timestamp=ts,
            cpu_temp=row.cpu_temp,
            gpu_temp=row.gpu_temp,
            battery_temp=row.battery_temp,
        )
        for ts, row in _windowed(session, ThermalSummaryReading, window)
    ]
    cpu_load_rows = _windowed(session, CpuLoadReading, window)
    cpu_load = [
        CpuLoadPoint(
            timestamp=ts,
            load1=row.load1,
            load5=row.load5,
            load15=row.load15,
            uptime=row.uptime,
        )
        for ts, row in cpu_load_rows
    ]
    memory = [
        MemoryPoint(
            timestamp=ts,
            used_percent=row.used_percent,
            swap_used_percent=row.swap_used_percent,
            available=row.available,
            total=row.total,
        )
        for ts, row in _windowed(session, MemoryReading, window)
    ]

    medium_reading_id = _latest_reading_id(session, selected.id, "medium")

    system_info = None
    if cpu_load_rows:
        _, latest_load = cpu_load_rows[-1]
        system_info = SystemInfo(
            uptime=latest_load.uptime,
            total_processes=latest_load.total_processes,
            running_processes=latest_load.running_processes,
            online_cpus=list(latest_load.online_cpus or []),
            display_brightness=_display_brightness(session, selected.id),
        )

    return DashboardData(
        devices=[_device_view(device) for device in devices],
        selected_device=_device_view(selected),
        battery=battery,
        thermal=thermal,
        cpu_load=cpu_load,
        memory=memory,
        top_processes=_top_processes(
            session, medium_reading_id, settings.dashboard_top_process_limit
        ),
        gpu_info=_gpu_info(session, medium_reading_id),
        system_info=system_info,
        network_stats=_network_stats(session, window),
    )


def get_dashboard(
    device_external_id: str | None = None,
    hours: int | None = None,
    limit: int | None = None,
) -> DashboardData:
    """Assemble the dashboard view for one device.

    The "latest" lookups (processes, GPU, display, network) are separate
    queries and may see newer submissions than the series do.
    """
    settings = get_settings()
    hours = hours if hours is not None else settings.dashboard_default_hours
    limit = limit if limit is not None else settings.dashboard_default_limit
    data = run_with_db_retry(
        lambda session: build_dashboard(
            session, device_external_id=device_external_id, hours=hours, limit=limit
        ),
        operation_name="dashboard",
    )
    logger.info(
        "dashboard_served",
        extra={
            "device_external_id": data.selected_device.device_id if data.selected_device else None,
            "hours": hours,
            "limit": limit,
            "points": len(data.battery) + len(data.thermal) + len(data.cpu_load) + len(data.memory),
        },
    )
    return data
