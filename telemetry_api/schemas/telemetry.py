from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter, field_validator, model_validator

from telemetry_api.schemas.common import CamelSchema
from telemetry_api.schemas.enums import (
    BatteryHealth,
    BatteryStatus,
    BlockDeviceType,
    ChargeType,
    NetworkInterfaceType,
    RfKillType,
    UsbType,
)


# ---------------------------------------------------------------------------
# High frequency: power, thermal, cpu, memory, network
# ---------------------------------------------------------------------------


class BatteryTelemetry(CamelSchema):
    capacity: int
    status: BatteryStatus
    voltage: float
    current: float
    temperature: float
    charge_full: int
    charge_full_design: int
    health: BatteryHealth
    present: bool
    charge_type: ChargeType
    energy_full_design: float


class UsbInputTelemetry(CamelSchema):
    present: bool
    health: BatteryHealth
    input_current_limit: float
    input_voltage_limit: float


class UsbCPdTelemetry(CamelSchema):
    online: bool
    voltage: float
    voltage_min: float
    voltage_max: float
    current: float
    current_max: float
    usb_type: UsbType


class TypeCPortTelemetry(CamelSchema):
    data_role: str = Field(max_length=50)
    power_role: str = Field(max_length=50)
    orientation: str = Field(max_length=50)
    power_operation_mode: str = Field(max_length=50)
    vconn_source: bool


class PowerTelemetry(CamelSchema):
    battery: BatteryTelemetry
    usb_input: UsbInputTelemetry
    usb_c_pd: UsbCPdTelemetry
    type_c_port: TypeCPortTelemetry


class TripPoint(CamelSchema):
    index: int
    temperature: float
    type: Literal["passive", "active", "critical", "hot"]


class ThermalZoneTelemetry(CamelSchema):
    zone: int
    type: str = Field(max_length=100)
    temperature: float
    trip_points: list[TripPoint] | None = None


class CoolingDeviceTelemetry(CamelSchema):
    index: int
    type: str = Field(max_length=100)
    current_state: int
    max_state: int


class ThermalTelemetry(CamelSchema):
    zones: list[ThermalZoneTelemetry]
    cooling_devices: list[CoolingDeviceTelemetry]
    battery_temp: float
    cpu_temp: float
    gpu_temp: float


class CpuFrequencyTelemetry(CamelSchema):
    cpu: int
    current_freq: int
    min_freq: int
    max_freq: int
    hardware_min_freq: int
    hardware_max_freq: int
    governor: str = Field(max_length=50)


class CpuTimeTelemetry(CamelSchema):
    cpu: str = Field(max_length=20)
    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int
    steal: int


class LoadAverage(CamelSchema):
    load1: float
    load5: float
    load15: float
    running_processes: int
    total_processes: int


class HighFrequencyCpu(CamelSchema):
    frequencies: list[CpuFrequencyTelemetry]
    cpu_times: list[CpuTimeTelemetry]
    load_average: LoadAverage
    uptime: float
    idle_time: float
    online_cpus: list[int]
    offline_cpus: list[int]


class MemoryTelemetry(CamelSchema):
    total: int
    free: int
    available: int
    buffers: int
    cached: int
    swap_total: int
    swap_free: int
    swap_used: int
    active: int
    inactive: int
    active_anon: int
    inactive_anon: int
    active_file: int
    inactive_file: int
    dirty: int
    writeback: int
    anon_pages: int
    mapped: int
    shmem: int
    slab: int
    s_reclaimable: int
    s_unreclaim: int
    used_percent: float
    swap_used_percent: float


class NetworkInterfaceStats(CamelSchema):
    rx_bytes: int
    tx_bytes: int
    rx_packets: int
    tx_packets: int
    rx_errors: int
    tx_errors: int
    rx_dropped: int
    tx_dropped: int
    rx_fifo: int
    tx_fifo: int
    rx_frame: int
    tx_carrier: int
    collisions: int


class NetworkInterfaceTelemetry(CamelSchema):
    name: str = Field(max_length=100)
    address: str = Field(max_length=100)
    carrier: bool
    carrier_changes: int
    operstate: str = Field(max_length=50)
    mtu: int
    stats: NetworkInterfaceStats
    type: NetworkInterfaceType


class WifiTelemetry(CamelSchema):
    signal_strength: int | None = None
    link_quality: int | None = None
    noise_level: int | None = None
    ssid: str | None = Field(default=None, max_length=255)
    frequency: int | None = None
    bitrate: float | None = None


class NetworkTelemetry(CamelSchema):
    interfaces: list[NetworkInterfaceTelemetry]
    wifi: WifiTelemetry | None = None
    total_rx_bytes: int
    total_tx_bytes: int


class HighFrequencyTelemetry(CamelSchema):
    power: PowerTelemetry
    thermal: ThermalTelemetry
    cpu: HighFrequencyCpu
    memory: MemoryTelemetry
    network: NetworkTelemetry


# ---------------------------------------------------------------------------
# Medium frequency: cpu statistics, gpu, storage, processes
# ---------------------------------------------------------------------------


class CpuTimeInState(CamelSchema):
    frequency: int
    time_ms: int


class CpuFrequencyStats(CamelSchema):
    cpu: int
    time_in_state: list[CpuTimeInState]
    total_transitions: int


class CpuIdleState(CamelSchema):
    index: int
    name: str
    description: str
    usage: int
    time_us: int
    latency_us: int


class CpuIdleTelemetry(CamelSchema):
    cpu: int
    states: list[CpuIdleState]


class CpuStatsTelemetry(CamelSchema):
    frequency_stats: list[CpuFrequencyStats] | None = None
    idle_stats: list[CpuIdleTelemetry] | None = None


class GpuFrequencyTelemetry(CamelSchema):
    current_freq: int
    target_freq: int
    min_freq: int
    max_freq: int
    governor: str = Field(max_length=50)
    available_frequencies: list[int]
    polling_interval_ms: int


class GpuTransitionStats(CamelSchema):
    from_freq: int
    to_freq: int
    count: int


class GpuTelemetry(CamelSchema):
    frequency: GpuFrequencyTelemetry
    transition_stats: list[GpuTransitionStats] | None = None
    total_transitions: int | None = None


class BlockDeviceStats(CamelSchema):
    reads_completed: int
    reads_merged: int
    sectors_read: int
    read_time_ms: int
    writes_completed: int
    writes_merged: int
    sectors_written: int
    write_time_ms: int
    ios_in_progress: int
    io_time_ms: int
    weighted_io_time_ms: int


class BlockDeviceTelemetry(CamelSchema):
    name: str = Field(max_length=100)
    type: BlockDeviceType
    size: int
    stats: BlockDeviceStats
    bytes_read: int
    bytes_written: int
    partitions: list[BlockDeviceTelemetry] | None = None


class StorageTelemetry(CamelSchema):
    devices: list[BlockDeviceTelemetry]
    total_bytes_read: int
    total_bytes_written: int
    total_io_time_ms: int


class ProcessTelemetry(CamelSchema):
    pid: int
    name: str = Field(max_length=255)
    state: str = Field(max_length=10)
    ppid: int
    pgrp: int
    session: int
    user_time_ms: int
    system_time_ms: int
    total_cpu_time_ms: int
    cpu_percent: float | None = None
    vsize: int
    rss: int
    rss_limit: int
    memory_percent: float
    num_threads: int
    nice: int
    priority: int
    start_time: float
    cmdline: str
    oom_score: int
    read_bytes: int | None = None
    write_bytes: int | None = None


class ProcessSummary(CamelSchema):
    total: int
    running: int
    sleeping: int
    zombie: int
    stopped: int


class ProcessesTelemetry(CamelSchema):
    processes: list[ProcessTelemetry]
    summary: ProcessSummary
    total_cpu_time: int
    context_switches: int
    processes_created: int


class MediumFrequencyTelemetry(CamelSchema):
    cpu_stats: CpuStatsTelemetry
    gpu: GpuTelemetry
    storage: StorageTelemetry
    processes: ProcessesTelemetry


# ---------------------------------------------------------------------------
# Low frequency: sensors and system
# ---------------------------------------------------------------------------


class Vector3D(CamelSchema):
    x: float
    y: float
    z: float


class AmbientLightTelemetry(CamelSchema):
    illuminance_raw: float
    illuminance_scale: float
    illuminance_lux: float


class ProximityTelemetry(CamelSchema):
    proximity_raw: float
    proximity_scale: float
    near_level: float
    is_near: bool


class AccelerometerTelemetry(CamelSchema):
    raw: Vector3D
    scale: float
    acceleration: Vector3D
    magnitude: float


class GyroscopeTelemetry(CamelSchema):
    raw: Vector3D
    scale: float
    angular_velocity: Vector3D
    magnitude: float


class MagnetometerTelemetry(CamelSchema):
    raw: Vector3D
    scale: float
    magnetic_field: Vector3D
    heading: float


class AdcChannelTelemetry(CamelSchema):
    channel: int
    raw: float
    scale: float
    voltage: float


class SensorsTelemetry(CamelSchema):
    ambient_light: AmbientLightTelemetry
    proximity: ProximityTelemetry
    accelerometer: AccelerometerTelemetry
    gyroscope: GyroscopeTelemetry
    magnetometer: MagnetometerTelemetry
    adc_channels: list[AdcChannelTelemetry]


class DisplayTelemetry(CamelSchema):
    brightness: int
    max_brightness: int
    brightness_percent: float
    power: bool


class LedTelemetry(CamelSchema):
    name: str = Field(max_length=100)
    brightness: int
    max_brightness: int
    trigger: str = Field(max_length=100)


class RfKillTelemetry(CamelSchema):
    type: RfKillType
    name: str = Field(max_length=100)
    soft_blocked: bool
    hard_blocked: bool


class SystemTelemetry(CamelSchema):
    display: DisplayTelemetry
    leds: list[LedTelemetry]
    rfkill: list[RfKillTelemetry]
    wakeup_count: int


class LowFrequencyTelemetry(CamelSchema):
    sensors: SensorsTelemetry
    system: SystemTelemetry


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class TelemetryEnvelope(CamelSchema):
    device_id: str = Field(min_length=1, max_length=255)
    timestamp: datetime
    timestamp_ms: int | None = None

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def fill_timestamp_ms(self) -> "TelemetryEnvelope":
        if self.timestamp_ms is None:
            self.timestamp_ms = int(self.timestamp.timestamp() * 1000)
        return self


class HighFrequencyPayload(TelemetryEnvelope):
    frequency: Literal["high"]
    data: HighFrequencyTelemetry


class MediumFrequencyPayload(TelemetryEnvelope):
    frequency: Literal["medium"]
    data: MediumFrequencyTelemetry


class LowFrequencyPayload(TelemetryEnvelope):
    frequency: Literal["low"]
    data: LowFrequencyTelemetry


TelemetryPayload = Annotated[
    Union[HighFrequencyPayload, MediumFrequencyPayload, LowFrequencyPayload],
    Field(discriminator="frequency"),
]

TELEMETRY_PAYLOAD_ADAPTER: TypeAdapter[Any] = TypeAdapter(TelemetryPayload)


class TelemetryAck(CamelSchema):
    received: bool = True
    id: str
    timestamp: str


class BatchTelemetryAck(CamelSchema):
    received: int
    failed: int = 0
    ids: list[str]
    errors: list[str] = Field(default_factory=list)
