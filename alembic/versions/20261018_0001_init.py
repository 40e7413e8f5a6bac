from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


ENUMS = {
    "telemetry_frequency": ("high", "medium", "low"),
    "battery_status": ("Charging", "Discharging", "Full", "Not charging", "Unknown"),
    "battery_health": ("Good", "Overheat", "Dead", "Over voltage", "Failure", "Unknown"),
    "charge_type": ("Fast", "Trickle", "Standard", "Unknown"),
    "usb_type": ("Unknown", "SDP", "DCP", "CDP", "ACA", "C", "PD", "PD_DRP", "PD_PPS", "BrickID"),
    "network_interface_type": ("wifi", "cellular", "usb", "loopback", "other"),
    "block_device_type": ("emmc", "sdcard", "zram", "loop", "other"),
    "rfkill_type": ("bluetooth", "wifi", "wwan"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _child_table(name: str, *columns: sa.Column, one_per_reading: bool = False) -> None:
    constraints = []
    if one_per_reading:
        constraints.append(sa.UniqueConstraint("reading_id", name=f"uq_{name}_reading_id"))
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "reading_id",
            sa.Integer(),
            sa.ForeignKey("telemetry_readings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *columns,
        *constraints,
    )
    op.create_index(f"ix_{name}_reading_id", name, ["reading_id"])


def _bigints(*names: str) -> list[sa.Column]:
    return [sa.Column(name, sa.BigInteger(), nullable=False) for name in names]


def _floats(*names: str) -> list[sa.Column]:
    return [sa.Column(name, sa.Float(), nullable=False) for name in names]


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "devices",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("external_id", name="uq_devices_external_id"),
    )

    op.create_table(
        "telemetry_readings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "device_id",
            sa.Integer(),
            sa.ForeignKey("devices.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("timestamp_ms", sa.BigInteger(), nullable=False),
        sa.Column("frequency", _enum("telemetry_frequency"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_telemetry_readings_device_id", "telemetry_readings", ["device_id"])
    op.create_index("ix_telemetry_readings_timestamp", "telemetry_readings", ["timestamp"])
    op.create_index("ix_telemetry_readings_frequency", "telemetry_readings", ["frequency"])
    op.create_index(
        "ix_telemetry_readings_device_time", "telemetry_readings", ["device_id", "timestamp"]
    )

    # High frequency
    _child_table(
        "battery_readings",
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("status", _enum("battery_status"), nullable=False),
        *_floats("voltage", "current", "temperature"),
        sa.Column("charge_full", sa.Integer(), nullable=False),
        sa.Column("charge_full_design", sa.Integer(), nullable=False),
        sa.Column("health", _enum("battery_health"), nullable=False),
        sa.Column("present", sa.Boolean(), nullable=False),
        sa.Column("charge_type", _enum("charge_type"), nullable=False),
        sa.Column("energy_full_design", sa.Float(), nullable=False),
    )
    _child_table(
        "usb_input_readings",
        sa.Column("present", sa.Boolean(), nullable=False),
        sa.Column("health", _enum("battery_health"), nullable=False),
        *_floats("input_current_limit", "input_voltage_limit"),
    )
    _child_table(
        "usb_pd_readings",
        sa.Column("online", sa.Boolean(), nullable=False),
        *_floats("voltage", "voltage_min", "voltage_max", "current", "current_max"),
        sa.Column("usb_type", _enum("usb_type"), nullable=False),
    )
    _child_table(
        "typec_port_readings",
        sa.Column("data_role", sa.String(length=50), nullable=False),
        sa.Column("power_role", sa.String(length=50), nullable=False),
        sa.Column("orientation", sa.String(length=50), nullable=False),
        sa.Column("power_operation_mode", sa.String(length=50), nullable=False),
        sa.Column("vconn_source", sa.Boolean(), nullable=False),
    )
    _child_table(
        "thermal_zone_readings",
        sa.Column("zone", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=100), nullable=False),
        sa.Column("temperature", sa.Float(), nullable=False),
        sa.Column("trip_points", postgresql.JSONB(), nullable=True),
    )
    _child_table(
        "cooling_device_readings",
        sa.Column("device_index", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=100), nullable=False),
        sa.Column("current_state", sa.Integer(), nullable=False),
        sa.Column("max_state", sa.Integer(), nullable=False),
    )
    _child_table(
        "thermal_summary_readings",
        *_floats("battery_temp", "cpu_temp", "gpu_temp"),
        one_per_reading=True,
    )
    _child_table(
        "cpu_frequency_readings",
        sa.Column("cpu", sa.Integer(), nullable=False),
        sa.Column("current_freq", sa.Integer(), nullable=False),
        sa.Column("min_freq", sa.Integer(), nullable=False),
        sa.Column("max_freq", sa.Integer(), nullable=False),
        sa.Column("hardware_min_freq", sa.Integer(), nullable=False),
        sa.Column("hardware_max_freq", sa.Integer(), nullable=False),
        sa.Column("governor", sa.String(length=50), nullable=False),
    )
    _child_table(
        "cpu_time_readings",
        sa.Column("cpu", sa.String(length=20), nullable=False),
        *_bigints(
            "user_time",
            "nice_time",
            "system_time",
            "idle_time",
            "iowait_time",
            "irq_time",
            "softirq_time",
            "steal_time",
        ),
    )
    _child_table(
        "cpu_load_readings",
        *_floats("load1", "load5", "load15"),
        sa.Column("running_processes", sa.Integer(), nullable=False),
        sa.Column("total_processes", sa.Integer(), nullable=False),
        *_floats("uptime", "idle_time"),
        sa.Column("online_cpus", postgresql.JSONB(), nullable=False),
        sa.Column("offline_cpus", postgresql.JSONB(), nullable=False),
        one_per_reading=True,
    )
    _child_table(
        "memory_readings",
        *_bigints(
            "total",
            "free",
            "available",
            "buffers",
            "cached",
            "swap_total",
            "swap_free",
            "swap_used",
            "active",
            "inactive",
            "active_anon",
            "inactive_anon",
            "active_file",
            "inactive_file",
            "dirty",
            "writeback",
            "anon_pages",
            "mapped",
            "shmem",
            "slab",
            "s_reclaimable",
            "s_unreclaim",
        ),
        *_floats("used_percent", "swap_used_percent"),
        one_per_reading=True,
    )
    _child_table(
        "network_interface_readings",
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("address", sa.String(length=100), nullable=False),
        sa.Column("carrier", sa.Boolean(), nullable=False),
        sa.Column("carrier_changes", sa.Integer(), nullable=False),
        sa.Column("operstate", sa.String(length=50), nullable=False),
        sa.Column("mtu", sa.Integer(), nullable=False),
        sa.Column("type", _enum("network_interface_type"), nullable=False),
        *_bigints(
            "rx_bytes",
            "tx_bytes",
            "rx_packets",
            "tx_packets",
            "rx_errors",
            "tx_errors",
            "rx_dropped",
            "tx_dropped",
            "rx_fifo",
            "tx_fifo",
            "rx_frame",
            "tx_carrier",
            "collisions",
        ),
    )
    _child_table(
        "network_summary_readings",
        *_bigints("total_rx_bytes", "total_tx_bytes"),
        sa.Column("wifi_signal_strength", sa.Integer(), nullable=True),
        sa.Column("wifi_link_quality", sa.Integer(), nullable=True),
        sa.Column("wifi_noise_level", sa.Integer(), nullable=True),
        sa.Column("wifi_ssid", sa.String(length=255), nullable=True),
        sa.Column("wifi_frequency", sa.Integer(), nullable=True),
        sa.Column("wifi_bitrate", sa.Float(), nullable=True),
        one_per_reading=True,
    )

    # Medium frequency
    _child_table(
        "cpu_frequency_stats",
        sa.Column("cpu", sa.Integer(), nullable=False),
        sa.Column("time_in_state", postgresql.JSONB(), nullable=False),
        sa.Column("total_transitions", sa.Integer(), nullable=False),
    )
    _child_table(
        "cpu_idle_stats",
        sa.Column("cpu", sa.Integer(), nullable=False),
        sa.Column("states", postgresql.JSONB(), nullable=False),
    )
    _child_table(
        "gpu_readings",
        sa.Column("current_freq", sa.Integer(), nullable=False),
        sa.Column("target_freq", sa.Integer(), nullable=False),
        sa.Column("min_freq", sa.Integer(), nullable=False),
        sa.Column("max_freq", sa.Integer(), nullable=False),
        sa.Column("governor", sa.String(length=50), nullable=False),
        sa.Column("available_frequencies", postgresql.JSONB(), nullable=False),
        sa.Column("polling_interval_ms", sa.Integer(), nullable=False),
        sa.Column("transition_stats", postgresql.JSONB(), nullable=True),
        sa.Column("total_transitions", sa.Integer(), nullable=True),
        one_per_reading=True,
    )
    _child_table(
        "storage_device_readings",
        sa.Column(
            "parent_device_id",
            sa.Integer(),
            sa.ForeignKey("storage_device_readings.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("depth", sa.Integer(), nullable=False),
        sa.Column("path", sa.Text(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", _enum("block_device_type"), nullable=False),
        *_bigints(
            "size",
            "bytes_read",
            "bytes_written",
            "reads_completed",
            "reads_merged",
            "sectors_read",
            "read_time_ms",
            "writes_completed",
            "writes_merged",
            "sectors_written",
            "write_time_ms",
        ),
        sa.Column("ios_in_progress", sa.Integer(), nullable=False),
        *_bigints("io_time_ms", "weighted_io_time_ms"),
    )
    op.create_index(
        "ix_storage_device_readings_parent_device_id",
        "storage_device_readings",
        ["parent_device_id"],
    )
    _child_table(
        "storage_summary_readings",
        *_bigints("total_bytes_read", "total_bytes_written", "total_io_time_ms"),
        one_per_reading=True,
    )
    _child_table(
        "process_readings",
        sa.Column("pid", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("state", sa.String(length=10), nullable=False),
        sa.Column("ppid", sa.Integer(), nullable=False),
        sa.Column("pgrp", sa.Integer(), nullable=False),
        sa.Column("session", sa.Integer(), nullable=False),
        *_bigints("user_time_ms", "system_time_ms", "total_cpu_time_ms"),
        sa.Column("cpu_percent", sa.Float(), nullable=True),
        *_bigints("vsize", "rss", "rss_limit"),
        sa.Column("memory_percent", sa.Float(), nullable=False),
        sa.Column("num_threads", sa.Integer(), nullable=False),
        sa.Column("nice", sa.Integer(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Float(), nullable=False),
        sa.Column("cmdline", sa.Text(), nullable=False),
        sa.Column("oom_score", sa.Integer(), nullable=False),
        sa.Column("read_bytes", sa.BigInteger(), nullable=True),
        sa.Column("write_bytes", sa.BigInteger(), nullable=True),
    )
    _child_table(
        "process_summary_readings",
        sa.Column("total", sa.Integer(), nullable=False),
        sa.Column("running", sa.Integer(), nullable=False),
        sa.Column("sleeping", sa.Integer(), nullable=False),
        sa.Column("zombie", sa.Integer(), nullable=False),
        sa.Column("stopped", sa.Integer(), nullable=False),
        *_bigints("total_cpu_time", "context_switches", "processes_created"),
        one_per_reading=True,
    )

    # Low frequency
    _child_table(
        "sensor_readings",
        *_floats(
            "illuminance_raw",
            "illuminance_scale",
            "illuminance_lux",
            "proximity_raw",
            "proximity_scale",
            "near_level",
        ),
        sa.Column("is_near", sa.Boolean(), nullable=False),
        *_floats(
            "accel_raw_x",
            "accel_raw_y",
            "accel_raw_z",
            "accel_scale",
            "accel_x",
            "accel_y",
            "accel_z",
            "accel_magnitude",
            "gyro_raw_x",
            "gyro_raw_y",
            "gyro_raw_z",
            "gyro_scale",
            "gyro_x",
            "gyro_y",
            "gyro_z",
            "gyro_magnitude",
            "mag_raw_x",
            "mag_raw_y",
            "mag_raw_z",
            "mag_scale",
            "mag_x",
            "mag_y",
            "mag_z",
            "mag_heading",
        ),
        sa.Column("adc_channels", postgresql.JSONB(), nullable=False),
        one_per_reading=True,
    )
    _child_table(
        "display_readings",
        sa.Column("brightness", sa.Integer(), nullable=False),
        sa.Column("max_brightness", sa.Integer(), nullable=False),
        sa.Column("brightness_percent", sa.Float(), nullable=False),
        sa.Column("power", sa.Boolean(), nullable=False),
        one_per_reading=True,
    )
    _child_table(
        "led_readings",
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("brightness", sa.Integer(), nullable=False),
        sa.Column("max_brightness", sa.Integer(), nullable=False),
        sa.Column("trigger", sa.String(length=100), nullable=False),
    )
    _child_table(
        "rfkill_readings",
        sa.Column("type", _enum("rfkill_type"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("soft_blocked", sa.Boolean(), nullable=False),
        sa.Column("hard_blocked", sa.Boolean(), nullable=False),
    )
    _child_table(
        "system_wakeup_readings",
        sa.Column("wakeup_count", sa.Integer(), nullable=False),
        one_per_reading=True,
    )


CHILD_TABLES = (
    "system_wakeup_readings",
    "rfkill_readings",
    "led_readings",
    "display_readings",
    "sensor_readings",
    "process_summary_readings",
    "process_readings",
    "storage_summary_readings",
    "storage_device_readings",
    "gpu_readings",
    "cpu_idle_stats",
    "cpu_frequency_stats",
    "network_summary_readings",
    "network_interface_readings",
    "memory_readings",
    "cpu_load_readings",
    "cpu_time_readings",
    "cpu_frequency_readings",
    "thermal_summary_readings",
    "cooling_device_readings",
    "thermal_zone_readings",
    "typec_port_readings",
    "usb_pd_readings",
    "usb_input_readings",
    "battery_readings",
)


def downgrade() -> None:
    for name in CHILD_TABLES:
        op.drop_table(name)
    op.drop_table("telemetry_readings")
    op.drop_table("devices")
    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
