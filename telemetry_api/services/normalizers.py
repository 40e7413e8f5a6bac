from __future__ import annotations

from typing import Any, Callable

from sqlalchemy.orm import Session

from telemetry_api.db.models import (
    Base,
    BatteryReading,
    CoolingDeviceReading,
    CpuFrequencyReading,
    CpuFrequencyStat,
    CpuIdleStat,
    CpuLoadReading,
    CpuTimeReading,
    DisplayReading,
    GpuReading,
    LedReading,
    MemoryReading,
    NetworkInterfaceReading,
    NetworkSummaryReading,
    ProcessReading,
    ProcessSummaryReading,
    RfKillReading,
    SensorReading,
    StorageDeviceReading,
    StorageSummaryReading,
    SystemWakeupReading,
    ThermalSummaryReading,
    ThermalZoneReading,
    TypeCPortReading,
    UsbInputReading,
    UsbPdReading,
)
from telemetry_api.schemas.telemetry import (
    BlockDeviceTelemetry,
    HighFrequencyPayload,
    HighFrequencyTelemetry,
    LowFrequencyPayload,
    LowFrequencyTelemetry,
    MediumFrequencyPayload,
    MediumFrequencyTelemetry,
)


def _dump_json(items: list[Any] | None) -> list[dict] | None:
    if items is None:
        return None
    return [item.model_dump(by_alias=True) for item in items]


# ---------------------------------------------------------------------------
# High frequency
# ---------------------------------------------------------------------------


def _power_rows(reading_id: int, data: HighFrequencyTelemetry) -> list[Base]:
    power = data.power
    return [
        BatteryReading(reading_id=reading_id, **power.battery.model_dump()),
        UsbInputReading(reading_id=reading_id, **power.usb_input.model_dump()),
        UsbPdReading(reading_id=reading_id, **power.usb_c_pd.model_dump()),
        TypeCPortReading(reading_id=reading_id, **power.type_c_port.model_dump()),
    ]


def _thermal_rows(reading_id: int, data: HighFrequencyTelemetry) -> list[Base]:
    thermal = data.thermal
    rows: list[Base] = [
        ThermalZoneReading(
            reading_id=reading_id,
            zone=zone.zone,
            type=zone.type,
            temperature=zone.temperature,
            trip_points=_dump_json(zone.trip_points),
        )
        for zone in thermal.zones
    ]
    rows.extend(
        CoolingDeviceReading(
            reading_id=reading_id,
            device_index=device.index,
            type=device.type,
            current_state=device.current_state,
            max_state=device.max_state,
        )
        for device in thermal.cooling_devices
    )
    rows.append(
        ThermalSummaryReading(
            reading_id=reading_id,
            battery_temp=thermal.battery_temp,
            cpu_temp=thermal.cpu_temp,
            gpu_temp=thermal.gpu_temp,
        )
    )
    return rows


def _cpu_rows(reading_id: int, data: HighFrequencyTelemetry) -> list[Base]:
    cpu = data.cpu
    rows: list[Base] = [
        CpuFrequencyReading(reading_id=reading_id, **frequency.model_dump())
        for frequency in cpu.frequencies
    ]
    rows.extend(
        CpuTimeReading(reading_id=reading_id, **cpu_time.model_dump()) for cpu_time in cpu.cpu_times
    )
    load = cpu.load_average
    rows.append(
        CpuLoadReading(
            reading_id=reading_id,
            load1=load.load1,
            load5=load.load5,
            load15=load.load15,
            running_processes=load.running_processes,
            total_processes=load.total_processes,
            uptime=cpu.uptime,
            idle_time=cpu.idle_time,
            online_cpus=list(cpu.online_cpus),
            offline_cpus=list(cpu.offline_cpus),
        )
    )
    return rows


def _memory_rows(reading_id: int, data: HighFrequencyTelemetry) -> list[Base]:
    return [MemoryReading(reading_id=reading_id, **data.memory.model_dump())]


def _network_rows(reading_id: int, data: HighFrequencyTelemetry) -> list[Base]:
    network = data.network
    rows: list[Base] = [
        NetworkInterfaceReading(
            reading_id=reading_id,
            **interface.model_dump(exclude={"stats"}),
            **interface.stats.model_dump(),
        )
        for interface in network.interfaces
    ]
    wifi = network.wifi
    rows.append(
        NetworkSummaryReading(
            reading_id=reading_id,
            total_rx_bytes=network.total_rx_bytes,
            total_tx_bytes=network.total_tx_bytes,
            wifi_signal_strength=wifi.signal_strength if wifi else None,
            wifi_link_quality=wifi.link_quality if wifi else None,
            wifi_noise_level=wifi.noise_level if wifi else None,
            wifi_ssid=wifi.ssid if wifi else None,
            wifi_frequency=wifi.frequency if wifi else None,
            wifi_bitrate=wifi.bitrate if wifi else None,
        )
    )
    return rows


def normalize_high_frequency(
    session: Session, reading_id: int, payload: HighFrequencyPayload
) -> int:
    data = payload.data
    rows = [
        *_power_rows(reading_id, data),
        *_thermal_rows(reading_id, data),
        *_cpu_rows(reading_id, data),
        *_memory_rows(reading_id, data),
        *_network_rows(reading_id, data),
    ]
    session.add_all(rows)
    return len(rows)


# ---------------------------------------------------------------------------
# Medium frequency
# ---------------------------------------------------------------------------


def _cpu_stats_rows(reading_id: int, data: MediumFrequencyTelemetry) -> list[Base]:
    stats = data.cpu_stats
    rows: list[Base] = [
        CpuFrequencyStat(
            reading_id=reading_id,
            cpu=item.cpu,
            time_in_state=_dump_json(item.time_in_state),
            total_transitions=item.total_transitions,
        )
        for item in stats.frequency_stats or []
    ]
    rows.extend(
        CpuIdleStat(reading_id=reading_id, cpu=item.cpu, states=_dump_json(item.states))
        for item in stats.idle_stats or []
    )
    return rows


def _gpu_rows(reading_id: int, data: MediumFrequencyTelemetry) -> list[Base]:
    gpu = data.gpu
    frequency = gpu.frequency
    return [
        GpuReading(
            reading_id=reading_id,
            current_freq=frequency.current_freq,
            target_freq=frequency.target_freq,
            min_freq=frequency.min_freq,
            max_freq=frequency.max_freq,
            governor=frequency.governor,
            available_frequencies=list(frequency.available_frequencies),
            polling_interval_ms=frequency.polling_interval_ms,
            transition_stats=_dump_json(gpu.transition_stats),
            total_transitions=gpu.total_transitions,
        )
    ]


def build_storage_device_rows(
    reading_id: int, devices: list[BlockDeviceTelemetry]
) -> list[StorageDeviceReading]:
    """Flatten a block device forest into rows, parents before their partitions.

    Walks depth-first with an explicit stack so partition nesting depth never
    touches the interpreter's recursion limit. Parent links are set through
    the ``parent`` relationship; the ORM orders the inserts on flush.
    """
    rows: list[StorageDeviceReading] = []
    stack: list[tuple[BlockDeviceTelemetry, StorageDeviceReading | None]] = [
        (device, None) for device in reversed(devices)
    ]
    while stack:
        device, parent = stack.pop()
        depth = parent.depth + 1 if parent is not None else 0
        path = f"{parent.path}/{device.name}" if parent is not None else device.name
        row = StorageDeviceReading(
            reading_id=reading_id,
            parent=parent,
            depth=depth,
            path=path,
            name=device.name,
            type=device.type,
            size=device.size,
            bytes_read=device.bytes_read,
            bytes_written=device.bytes_written,
            **device.stats.model_dump(),
        )
        rows.append(row)
        for partition in reversed(device.partitions or []):
            stack.append((partition, row))
    return rows


def _storage_rows(reading_id: int, data: MediumFrequencyTelemetry) -> list[Base]:
    storage = data.storage
    rows: list[Base] = list(build_storage_device_rows(reading_id, storage.devices))
    rows.append(
        StorageSummaryReading(
            reading_id=reading_id,
            total_bytes_read=storage.total_bytes_read,
            total_bytes_written=storage.total_bytes_written,
            total_io_time_ms=storage.total_io_time_ms,
        )
    )
    return rows


def _process_rows(reading_id: int, data: MediumFrequencyTelemetry) -> list[Base]:
    processes = data.processes
    rows: list[Base] = [
        ProcessReading(reading_id=reading_id, **process.model_dump())
        for process in processes.processes
    ]
    rows.append(
        ProcessSummaryReading(
            reading_id=reading_id,
            **processes.summary.model_dump(),
            total_cpu_time=processes.total_cpu_time,
            context_switches=processes.context_switches,
            processes_created=processes.processes_created,
        )
    )
    return rows


def normalize_medium_frequency(
    session: Session, reading_id: int, payload: MediumFrequencyPayload
) -> int:
    data = payload.data
    rows = [
        *_cpu_stats_rows(reading_id, data),
        *_gpu_rows(reading_id, data),
        *_storage_rows(reading_id, data),
        *_process_rows(reading_id, data),
    ]
    session.add_all(rows)
    return len(rows)


# ---------------------------------------------------------------------------
# Low frequency
# ---------------------------------------------------------------------------


def _sensor_rows(reading_id: int, data: LowFrequencyTelemetry) -> list[Base]:
    sensors = data.sensors
    light = sensors.ambient_light
    proximity = sensors.proximity
    accel = sensors.accelerometer
    gyro = sensors.gyroscope
    mag = sensors.magnetometer
    return [
        SensorReading(
            reading_id=reading_id,
            illuminance_raw=light.illuminance_raw,
            illuminance_scale=light.illuminance_scale,
            illuminance_lux=light.illuminance_lux,
            proximity_raw=proximity.proximity_raw,
            proximity_scale=proximity.proximity_scale,
            near_level=proximity.near_level,
            is_near=proximity.is_near,
            accel_raw_x=accel.raw.x,
            accel_raw_y=accel.raw.y,
            accel_raw_z=accel.raw.z,
            accel_scale=accel.scale,
            accel_x=accel.acceleration.x,
            accel_y=accel.acceleration.y,
            accel_z=accel.acceleration.z,
            accel_magnitude=accel.magnitude,
            gyro_raw_x=gyro.raw.x,
            gyro_raw_y=gyro.raw.y,
            gyro_raw_z=gyro.raw.z,
            gyro_scale=gyro.scale,
            gyro_x=gyro.angular_velocity.x,
            gyro_y=gyro.angular_velocity.y,
            gyro_z=gyro.angular_velocity.z,
            gyro_magnitude=gyro.magnitude,
            mag_raw_x=mag.raw.x,
            mag_raw_y=mag.raw.y,
            mag_raw_z=mag.raw.z,
            mag_scale=mag.scale,
            mag_x=mag.magnetic_field.x,
            mag_y=mag.magnetic_field.y,
            mag_z=mag.magnetic_field.z,
            mag_heading=mag.heading,
            adc_channels=_dump_json(sensors.adc_channels),
        )
    ]


def _system_rows(reading_id: int, data: LowFrequencyTelemetry) -> list[Base]:
    system = data.system
    rows: list[Base] = [DisplayReading(reading_id=reading_id, **system.display.model_dump())]
    rows.extend(LedReading(reading_id=reading_id, **led.model_dump()) for led in system.leds)
    rows.extend(
        RfKillReading(reading_id=reading_id, **switch.model_dump()) for switch in system.rfkill
    )
    rows.append(SystemWakeupReading(reading_id=reading_id, wakeup_count=system.wakeup_count))
    return rows


def normalize_low_frequency(session: Session, reading_id: int, payload: LowFrequencyPayload) -> int:
    data = payload.data
    rows = [*_sensor_rows(reading_id, data), *_system_rows(reading_id, data)]
    session.add_all(rows)
    return len(rows)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

Normalizer = Callable[[Session, int, Any], int]

_NORMALIZERS: dict[type, Normalizer] = {
    HighFrequencyPayload: normalize_high_frequency,
    MediumFrequencyPayload: normalize_medium_frequency,
    LowFrequencyPayload: normalize_low_frequency,
}


class UnsupportedTierError(RuntimeError):
    pass


def normalizer_for(payload_type: type) -> Normalizer:
    try:
        return _NORMALIZERS[payload_type]
    except KeyError as exc:
        raise UnsupportedTierError(
            f"No normalizer registered for {payload_type.__name__}"
        ) from exc
