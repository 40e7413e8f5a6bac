from __future__ import annotations

from datetime import datetime

from telemetry_api.schemas.common import CamelSchema


class DashboardDevice(CamelSchema):
    id: int
    device_id: str
    name: str | None
    last_seen_at: datetime


class BatteryPoint(CamelSchema):
    timestamp: datetime
    capacity: int
    voltage: float
    current: float
    temperature: float
    status: str
    health: str


class ThermalPoint(CamelSchema):
    timestamp: datetime
    cpu_temp: float
    gpu_temp: float
    battery_temp: float


class CpuLoadPoint(CamelSchema):
    timestamp: datetime
    load1: float
    load5: float
    load15: float
    uptime: float


class MemoryPoint(CamelSchema):
    timestamp: datetime
    used_percent: float
    swap_used_percent: float
    available: int
    total: int


class TopProcess(CamelSchema):
    pid: int
    name: str
    cpu_percent: float | None
    memory_percent: float
    state: str
    cmdline: str


class GpuInfo(CamelSchema):
    current_freq: int
    governor: str
    min_freq: int
    max_freq: int


class SystemInfo(CamelSchema):
    uptime: float
    total_processes: int
    running_processes: int
    online_cpus: list[int]
    display_brightness: float | None


class NetworkStats(CamelSchema):
    total_rx_bytes: int
    total_tx_bytes: int
    wifi_signal: int | None
    wifi_ssid: str | None


class DashboardData(CamelSchema):
    devices: list[DashboardDevice] = []
    selected_device: DashboardDevice | None = None
    battery: list[BatteryPoint] = []
    thermal: list[ThermalPoint] = []
    cpu_load: list[CpuLoadPoint] = []
    memory: list[MemoryPoint] = []
    top_processes: list[TopProcess] = []
    gpu_info: GpuInfo | None = None
    system_info: SystemInfo | None = None
    network_stats: NetworkStats | None = None
