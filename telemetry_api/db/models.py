from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from telemetry_api.schemas.enums import (
    BATTERY_HEALTHS,
    BATTERY_STATUSES,
    BLOCK_DEVICE_TYPES,
    CHARGE_TYPES,
    NETWORK_INTERFACE_TYPES,
    RFKILL_TYPES,
    TELEMETRY_FREQUENCIES,
    USB_TYPES,
)


JsonDocument = JSON().with_variant(JSONB(), "postgresql")

telemetry_frequency_enum = Enum(*TELEMETRY_FREQUENCIES, name="telemetry_frequency")
battery_status_enum = Enum(*BATTERY_STATUSES, name="battery_status")
battery_health_enum = Enum(*BATTERY_HEALTHS, name="battery_health")
charge_type_enum = Enum(*CHARGE_TYPES, name="charge_type")
usb_type_enum = Enum(*USB_TYPES, name="usb_type")
network_interface_type_enum = Enum(*NETWORK_INTERFACE_TYPES, name="network_interface_type")
block_device_type_enum = Enum(*BLOCK_DEVICE_TYPES, name="block_device_type")
rfkill_type_enum = Enum(*RFKILL_TYPES, name="rfkill_type")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _reading_fk() -> Any:
    return mapped_column(
        Integer, ForeignKey("telemetry_readings.id", ondelete="CASCADE"), nullable=False
    )


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Core tables
# ---------------------------------------------------------------------------


class Device(Base):
    __tablename__ = "devices"
    __table_args__ = (UniqueConstraint("external_id", name="uq_devices_external_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(String(255))
    name: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    last_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    readings: Mapped[list["TelemetryReading"]] = relationship(
        back_populates="device", passive_deletes=True
    )


class TelemetryReading(Base):
    __tablename__ = "telemetry_readings"
    __table_args__ = (
        Index("ix_telemetry_readings_device_id", "device_id"),
        Index("ix_telemetry_readings_timestamp", "timestamp"),
        Index("ix_telemetry_readings_frequency", "frequency"),
        Index("ix_telemetry_readings_device_time", "device_id", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("devices.id", ondelete="CASCADE"), nullable=False
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    timestamp_ms: Mapped[int] = mapped_column(BigInteger)
    frequency: Mapped[str] = mapped_column(telemetry_frequency_enum)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    device: Mapped["Device"] = relationship(back_populates="readings")


# ---------------------------------------------------------------------------
# High frequency: power
# ---------------------------------------------------------------------------


class BatteryReading(Base):
    __tablename__ = "battery_readings"
    __table_args__ = (Index("ix_battery_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    capacity: Mapped[int] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(battery_status_enum)
    voltage: Mapped[float] = mapped_column(Float)
    current: Mapped[float] = mapped_column(Float)
    temperature: Mapped[float] = mapped_column(Float)
    charge_full: Mapped[int] = mapped_column(Integer)
    charge_full_design: Mapped[int] = mapped_column(Integer)
    health: Mapped[str] = mapped_column(battery_health_enum)
    present: Mapped[bool] = mapped_column(Boolean)
    charge_type: Mapped[str] = mapped_column(charge_type_enum)
    energy_full_design: Mapped[float] = mapped_column(Float)


class UsbInputReading(Base):
    __tablename__ = "usb_input_readings"
    __table_args__ = (Index("ix_usb_input_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    present: Mapped[bool] = mapped_column(Boolean)
    health: Mapped[str] = mapped_column(battery_health_enum)
    input_current_limit: Mapped[float] = mapped_column(Float)
    input_voltage_limit: Mapped[float] = mapped_column(Float)


class UsbPdReading(Base):
    __tablename__ = "usb_pd_readings"
    __table_args__ = (Index("ix_usb_pd_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    online: Mapped[bool] = mapped_column(Boolean)
    voltage: Mapped[float] = mapped_column(Float)
    voltage_min: Mapped[float] = mapped_column(Float)
    voltage_max: Mapped[float] = mapped_column(Float)
    current: Mapped[float] = mapped_column(Float)
    current_max: Mapped[float] = mapped_column(Float)
    usb_type: Mapped[str] = mapped_column(usb_type_enum)


class TypeCPortReading(Base):
    __tablename__ = "typec_port_readings"
    __table_args__ = (Index("ix_typec_port_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    data_role: Mapped[str] = mapped_column(String(50))
    power_role: Mapped[str] = mapped_column(String(50))
    orientation: Mapped[str] = mapped_column(String(50))
    power_operation_mode: Mapped[str] = mapped_column(String(50))
    vconn_source: Mapped[bool] = mapped_column(Boolean)


# ---------------------------------------------------------------------------
# High frequency: thermal
# ---------------------------------------------------------------------------


class ThermalZoneReading(Base):
    __tablename__ = "thermal_zone_readings"
    __table_args__ = (Index("ix_thermal_zone_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    zone: Mapped[int] = mapped_column(Integer)
    type: Mapped[str] = mapped_column(String(100))
    temperature: Mapped[float] = mapped_column(Float)
    trip_points: Mapped[list | None] = mapped_column(JsonDocument)


class CoolingDeviceReading(Base):
    __tablename__ = "cooling_device_readings"
    __table_args__ = (Index("ix_cooling_device_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    device_index: Mapped[int] = mapped_column(Integer)
    type: Mapped[str] = mapped_column(String(100))
    current_state: Mapped[int] = mapped_column(Integer)
    max_state: Mapped[int] = mapped_column(Integer)


class ThermalSummaryReading(Base):
    __tablename__ = "thermal_summary_readings"
    __table_args__ = (
        UniqueConstraint("reading_id", name="uq_thermal_summary_readings_reading_id"),
        Index("ix_thermal_summary_readings_reading_id", "reading_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    battery_temp: Mapped[float] = mapped_column(Float)
    cpu_temp: Mapped[float] = mapped_column(Float)
    gpu_temp: Mapped[float] = mapped_column(Float)


# ---------------------------------------------------------------------------
# High frequency: CPU, memory, network
# ---------------------------------------------------------------------------


class CpuFrequencyReading(Base):
    __tablename__ = "cpu_frequency_readings"
    __table_args__ = (Index("ix_cpu_frequency_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    cpu: Mapped[int] = mapped_column(Integer)
    current_freq: Mapped[int] = mapped_column(Integer)
    min_freq: Mapped[int] = mapped_column(Integer)
    max_freq: Mapped[int] = mapped_column(Integer)
    hardware_min_freq: Mapped[int] = mapped_column(Integer)
    hardware_max_freq: Mapped[int] = mapped_column(Integer)
    governor: Mapped[str] = mapped_column(String(50))


class CpuTimeReading(Base):
    __tablename__ = "cpu_time_readings"
    __table_args__ = (Index("ix_cpu_time_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    cpu: Mapped[str] = mapped_column(String(20))
    user: Mapped[int] = mapped_column("user_time", BigInteger)
    nice: Mapped[int] = mapped_column("nice_time", BigInteger)
    system: Mapped[int] = mapped_column("system_time", BigInteger)
    idle: Mapped[int] = mapped_column("idle_time", BigInteger)
    iowait: Mapped[int] = mapped_column("iowait_time", BigInteger)
    irq: Mapped[int] = mapped_column("irq_time", BigInteger)
    softirq: Mapped[int] = mapped_column("softirq_time", BigInteger)
    steal: Mapped[int] = mapped_column("steal_time", BigInteger)


class CpuLoadReading(Base):
    __tablename__ = "cpu_load_readings"
    __table_args__ = (
        UniqueConstraint("reading_id", name="uq_cpu_load_readings_reading_id"),
        Index("ix_cpu_load_readings_reading_id", "reading_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    load1: Mapped[float] = mapped_column(Float)
    load5: Mapped[float] = mapped_column(Float)
    load15: Mapped[float] = mapped_column(Float)
    running_processes: Mapped[int] = mapped_column(Integer)
    total_processes: Mapped[int] = mapped_column(Integer)
    uptime: Mapped[float] = mapped_column(Float)
    idle_time: Mapped[float] = mapped_column(Float)
    online_cpus: Mapped[list] = mapped_column(JsonDocument)
    offline_cpus: Mapped[list] = mapped_column(JsonDocument)


class MemoryReading(Base):
    __tablename__ = "memory_readings"
    __table_args__ = (
        UniqueConstraint("reading_id", name="uq_memory_readings_reading_id"),
        Index("ix_memory_readings_reading_id", "reading_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    total: Mapped[int] = mapped_column(BigInteger)
    free: Mapped[int] = mapped_column(BigInteger)
    available: Mapped[int] = mapped_column(BigInteger)
    buffers: Mapped[int] = mapped_column(BigInteger)
    cached: Mapped[int] = mapped_column(BigInteger)
    swap_total: Mapped[int] = mapped_column(BigInteger)
    swap_free: Mapped[int] = mapped_column(BigInteger)
    swap_used: Mapped[int] = mapped_column(BigInteger)
    active: Mapped[int] = mapped_column(BigInteger)
    inactive: Mapped[int] = mapped_column(BigInteger)
    active_anon: Mapped[int] = mapped_column(BigInteger)
    inactive_anon: Mapped[int] = mapped_column(BigInteger)
    active_file: Mapped[int] = mapped_column(BigInteger)
    inactive_file: Mapped[int] = mapped_column(BigInteger)
    dirty: Mapped[int] = mapped_column(BigInteger)
    writeback: Mapped[int] = mapped_column(BigInteger)
    anon_pages: Mapped[int] = mapped_column(BigInteger)
    mapped: Mapped[int] = mapped_column(BigInteger)
    shmem: Mapped[int] = mapped_column(BigInteger)
    slab: Mapped[int] = mapped_column(BigInteger)
    s_reclaimable: Mapped[int] = mapped_column(BigInteger)
    s_unreclaim: Mapped[int] = mapped_column(BigInteger)
    used_percent: Mapped[float] = mapped_column(Float)
    swap_used_percent: Mapped[float] = mapped_column(Float)


class NetworkInterfaceReading(Base):
    __tablename__ = "network_interface_readings"
    __table_args__ = (Index("ix_network_interface_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    name: Mapped[str] = mapped_column(String(100))
    address: Mapped[str] = mapped_column(String(100))
    carrier: Mapped[bool] = mapped_column(Boolean)
    carrier_changes: Mapped[int] = mapped_column(Integer)
    operstate: Mapped[str] = mapped_column(String(50))
    mtu: Mapped[int] = mapped_column(Integer)
    type: Mapped[str] = mapped_column(network_interface_type_enum)
    rx_bytes: Mapped[int] = mapped_column(BigInteger)
    tx_bytes: Mapped[int] = mapped_column(BigInteger)
    rx_packets: Mapped[int] = mapped_column(BigInteger)
    tx_packets: Mapped[int] = mapped_column(BigInteger)
    rx_errors: Mapped[int] = mapped_column(BigInteger)
    tx_errors: Mapped[int] = mapped_column(BigInteger)
    rx_dropped: Mapped[int] = mapped_column(BigInteger)
    tx_dropped: Mapped[int] = mapped_column(BigInteger)
    rx_fifo: Mapped[int] = mapped_column(BigInteger)
    tx_fifo: Mapped[int] = mapped_column(BigInteger)
    rx_frame: Mapped[int] = mapped_column(BigInteger)
    tx_carrier: Mapped[int] = mapped_column(BigInteger)
    collisions: Mapped[int] = mapped_column(BigInteger)


class NetworkSummaryReading(Base):
    __tablename__ = "network_summary_readings"
    __table_args__ = (
        UniqueConstraint("reading_id", name="uq_network_summary_readings_reading_id"),
        Index("ix_network_summary_readings_reading_id", "reading_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    total_rx_bytes: Mapped[int] = mapped_column(BigInteger)
    total_tx_bytes: Mapped[int] = mapped_column(BigInteger)
    wifi_signal_strength: Mapped[int | None] = mapped_column(Integer)
    wifi_link_quality: Mapped[int | None] = mapped_column(Integer)
    wifi_noise_level: Mapped[int | None] = mapped_column(Integer)
    wifi_ssid: Mapped[str | None] = mapped_column(String(255))
    wifi_frequency: Mapped[int | None] = mapped_column(Integer)
    wifi_bitrate: Mapped[float | None] = mapped_column(Float)


# ---------------------------------------------------------------------------
# Medium frequency: CPU statistics, GPU, storage, processes
# ---------------------------------------------------------------------------


class CpuFrequencyStat(Base):
    __tablename__ = "cpu_frequency_stats"
    __table_args__ = (Index("ix_cpu_frequency_stats_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    cpu: Mapped[int] = mapped_column(Integer)
    time_in_state: Mapped[list] = mapped_column(JsonDocument)
    total_transitions: Mapped[int] = mapped_column(Integer)


class CpuIdleStat(Base):
    __tablename__ = "cpu_idle_stats"
    __table_args__ = (Index("ix_cpu_idle_stats_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    cpu: Mapped[int] = mapped_column(Integer)
    states: Mapped[list] = mapped_column(JsonDocument)


class GpuReading(Base):
    __tablename__ = "gpu_readings"
    __table_args__ = (
        UniqueConstraint("reading_id", name="uq_gpu_readings_reading_id"),
        Index("ix_gpu_readings_reading_id", "reading_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    current_freq: Mapped[int] = mapped_column(Integer)
    target_freq: Mapped[int] = mapped_column(Integer)
    min_freq: Mapped[int] = mapped_column(Integer)
    max_freq: Mapped[int] = mapped_column(Integer)
    governor: Mapped[str] = mapped_column(String(50))
    available_frequencies: Mapped[list] = mapped_column(JsonDocument)
    polling_interval_ms: Mapped[int] = mapped_column(Integer)
    transition_stats: Mapped[list | None] = mapped_column(JsonDocument)
    total_transitions: Mapped[int | None] = mapped_column(Integer)


class StorageDeviceReading(Base):
    __tablename__ = "storage_device_readings"
    __table_args__ = (
        Index("ix_storage_device_readings_reading_id", "reading_id"),
        Index("ix_storage_device_readings_parent_device_id", "parent_device_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    parent_device_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("storage_device_readings.id", ondelete="CASCADE")
    )
    depth: Mapped[int] = mapped_column(Integer, default=0)
    path: Mapped[str] = mapped_column(Text)
    name: Mapped[str] = mapped_column(String(100))
    type: Mapped[str] = mapped_column(block_device_type_enum)
    size: Mapped[int] = mapped_column(BigInteger)
    bytes_read: Mapped[int] = mapped_column(BigInteger)
    bytes_written: Mapped[int] = mapped_column(BigInteger)
    reads_completed: Mapped[int] = mapped_column(BigInteger)
    reads_merged: Mapped[int] = mapped_column(BigInteger)
    sectors_read: Mapped[int] = mapped_column(BigInteger)
    read_time_ms: Mapped[int] = mapped_column(BigInteger)
    writes_completed: Mapped[int] = mapped_column(BigInteger)
    writes_merged: Mapped[int] = mapped_column(BigInteger)
    sectors_written: Mapped[int] = mapped_column(BigInteger)
    write_time_ms: Mapped[int] = mapped_column(BigInteger)
    ios_in_progress: Mapped[int] = mapped_column(Integer)
    io_time_ms: Mapped[int] = mapped_column(BigInteger)
    weighted_io_time_ms: Mapped[int] = mapped_column(BigInteger)

    parent: Mapped["StorageDeviceReading | None"] = relationship(
        remote_side="StorageDeviceReading.id", back_populates="partitions"
    )
    partitions: Mapped[list["StorageDeviceReading"]] = relationship(
        back_populates="parent", passive_deletes=True
    )


class StorageSummaryReading(Base):
    __tablename__ = "storage_summary_readings"
    __table_args__ = (
        UniqueConstraint("reading_id", name="uq_storage_summary_readings_reading_id"),
        Index("ix_storage_summary_readings_reading_id", "reading_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    total_bytes_read: Mapped[int] = mapped_column(BigInteger)
    total_bytes_written: Mapped[int] = mapped_column(BigInteger)
    total_io_time_ms: Mapped[int] = mapped_column(BigInteger)


class ProcessReading(Base):
    __tablename__ = "process_readings"
    __table_args__ = (Index("ix_process_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    pid: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(255))
    state: Mapped[str] = mapped_column(String(10))
    ppid: Mapped[int] = mapped_column(Integer)
    pgrp: Mapped[int] = mapped_column(Integer)
    session: Mapped[int] = mapped_column(Integer)
    user_time_ms: Mapped[int] = mapped_column(BigInteger)
    system_time_ms: Mapped[int] = mapped_column(BigInteger)
    total_cpu_time_ms: Mapped[int] = mapped_column(BigInteger)
    cpu_percent: Mapped[float | None] = mapped_column(Float)
    vsize: Mapped[int] = mapped_column(BigInteger)
    rss: Mapped[int] = mapped_column(BigInteger)
    rss_limit: Mapped[int] = mapped_column(BigInteger)
    memory_percent: Mapped[float] = mapped_column(Float)
    num_threads: Mapped[int] = mapped_column(Integer)
    nice: Mapped[int] = mapped_column(Integer)
    priority: Mapped[int] = mapped_column(Integer)
    start_time: Mapped[float] = mapped_column(Float)
    cmdline: Mapped[str] = mapped_column(Text)
    oom_score: Mapped[int] = mapped_column(Integer)
    read_bytes: Mapped[int | None] = mapped_column(BigInteger)
    write_bytes: Mapped[int | None] = mapped_column(BigInteger)


class ProcessSummaryReading(Base):
    __tablename__ = "process_summary_readings"
    __table_args__ = (
        UniqueConstraint("reading_id", name="uq_process_summary_readings_reading_id"),
        Index("ix_process_summary_readings_reading_id", "reading_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    total: Mapped[int] = mapped_column(Integer)
    running: Mapped[int] = mapped_column(Integer)
    sleeping: Mapped[int] = mapped_column(Integer)
    zombie: Mapped[int] = mapped_column(Integer)
    stopped: Mapped[int] = mapped_column(Integer)
    total_cpu_time: Mapped[int] = mapped_column(BigInteger)
    context_switches: Mapped[int] = mapped_column(BigInteger)
    processes_created: Mapped[int] = mapped_column(BigInteger)


# ---------------------------------------------------------------------------
# Low frequency: sensors and system
# ---------------------------------------------------------------------------


class SensorReading(Base):
    __tablename__ = "sensor_readings"
    __table_args__ = (
        UniqueConstraint("reading_id", name="uq_sensor_readings_reading_id"),
        Index("ix_sensor_readings_reading_id", "reading_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    illuminance_raw: Mapped[float] = mapped_column(Float)
    illuminance_scale: Mapped[float] = mapped_column(Float)
    illuminance_lux: Mapped[float] = mapped_column(Float)
    proximity_raw: Mapped[float] = mapped_column(Float)
    proximity_scale: Mapped[float] = mapped_column(Float)
    near_level: Mapped[float] = mapped_column(Float)
    is_near: Mapped[bool] = mapped_column(Boolean)
    accel_raw_x: Mapped[float] = mapped_column(Float)
    accel_raw_y: Mapped[float] = mapped_column(Float)
    accel_raw_z: Mapped[float] = mapped_column(Float)
    accel_scale: Mapped[float] = mapped_column(Float)
    accel_x: Mapped[float] = mapped_column(Float)
    accel_y: Mapped[float] = mapped_column(Float)
    accel_z: Mapped[float] = mapped_column(Float)
    accel_magnitude: Mapped[float] = mapped_column(Float)
    gyro_raw_x: Mapped[float] = mapped_column(Float)
    gyro_raw_y: Mapped[float] = mapped_column(Float)
    gyro_raw_z: Mapped[float] = mapped_column(Float)
    gyro_scale: Mapped[float] = mapped_column(Float)
    gyro_x: Mapped[float] = mapped_column(Float)
    gyro_y: Mapped[float] = mapped_column(Float)
    gyro_z: Mapped[float] = mapped_column(Float)
    gyro_magnitude: Mapped[float] = mapped_column(Float)
    mag_raw_x: Mapped[float] = mapped_column(Float)
    mag_raw_y: Mapped[float] = mapped_column(Float)
    mag_raw_z: Mapped[float] = mapped_column(Float)
    mag_scale: Mapped[float] = mapped_column(Float)
    mag_x: Mapped[float] = mapped_column(Float)
    mag_y: Mapped[float] = mapped_column(Float)
    mag_z: Mapped[float] = mapped_column(Float)
    mag_heading: Mapped[float] = mapped_column(Float)
    adc_channels: Mapped[list] = mapped_column(JsonDocument)


class DisplayReading(Base):
    __tablename__ = "display_readings"
    __table_args__ = (
        UniqueConstraint("reading_id", name="uq_display_readings_reading_id"),
        Index("ix_display_readings_reading_id", "reading_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    brightness: Mapped[int] = mapped_column(Integer)
    max_brightness: Mapped[int] = mapped_column(Integer)
    brightness_percent: Mapped[float] = mapped_column(Float)
    power: Mapped[bool] = mapped_column(Boolean)


class LedReading(Base):
    __tablename__ = "led_readings"
    __table_args__ = (Index("ix_led_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    name: Mapped[str] = mapped_column(String(100))
    brightness: Mapped[int] = mapped_column(Integer)
    max_brightness: Mapped[int] = mapped_column(Integer)
    trigger: Mapped[str] = mapped_column(String(100))


class RfKillReading(Base):
    __tablename__ = "rfkill_readings"
    __table_args__ = (Index("ix_rfkill_readings_reading_id", "reading_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    type: Mapped[str] = mapped_column(rfkill_type_enum)
    name: Mapped[str] = mapped_column(String(100))
    soft_blocked: Mapped[bool] = mapped_column(Boolean)
    hard_blocked: Mapped[bool] = mapped_column(Boolean)


class SystemWakeupReading(Base):
    __tablename__ = "system_wakeup_readings"
    __table_args__ = (
        UniqueConstraint("reading_id", name="uq_system_wakeup_readings_reading_id"),
        Index("ix_system_wakeup_readings_reading_id", "reading_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reading_id: Mapped[int] = _reading_fk()
    wakeup_count: Mapped[int] = mapped_column(Integer)


HIGH_FREQUENCY_TABLES: tuple[type[Base], ...] = (
    BatteryReading,
    UsbInputReading,
    UsbPdReading,
    TypeCPortReading,
    ThermalZoneReading,
    CoolingDeviceReading,
    ThermalSummaryReading,
    CpuFrequencyReading,
    CpuTimeReading,
    CpuLoadReading,
    MemoryReading,
    NetworkInterfaceReading,
    NetworkSummaryReading,
)

MEDIUM_FREQUENCY_TABLES: tuple[type[Base], ...] = (
    CpuFrequencyStat,
    CpuIdleStat,
    GpuReading,
    StorageDeviceReading,
    StorageSummaryReading,
    ProcessReading,
    ProcessSummaryReading,
)

LOW_FREQUENCY_TABLES: tuple[type[Base], ...] = (
    SensorReading,
    DisplayReading,
    LedReading,
    RfKillReading,
    SystemWakeupReading,
)

TIER_TABLES: dict[str, tuple[type[Base], ...]] = {
    "high": HIGH_FREQUENCY_TABLES,
    "medium": MEDIUM_FREQUENCY_TABLES,
    "low": LOW_FREQUENCY_TABLES,
}
