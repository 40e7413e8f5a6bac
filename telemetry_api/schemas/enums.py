from __future__ import annotations

from typing import Literal, get_args

TelemetryFrequency = Literal["high", "medium", "low"]
BatteryStatus = Literal["Charging", "Discharging", "Full", "Not charging", "Unknown"]
BatteryHealth = Literal["Good", "Overheat", "Dead", "Over voltage", "Failure", "Unknown"]
ChargeType = Literal["Fast", "Trickle", "Standard", "Unknown"]
UsbType = Literal["Unknown", "SDP", "DCP", "CDP", "ACA", "C", "PD", "PD_DRP", "PD_PPS", "BrickID"]
NetworkInterfaceType = Literal["wifi", "cellular", "usb", "loopback", "other"]
BlockDeviceType = Literal["emmc", "sdcard", "zram", "loop", "other"]
RfKillType = Literal["bluetooth", "wifi", "wwan"]

TELEMETRY_FREQUENCIES: tuple[str, ...] = get_args(TelemetryFrequency)
BATTERY_STATUSES: tuple[str, ...] = get_args(BatteryStatus)
BATTERY_HEALTHS: tuple[str, ...] = get_args(BatteryHealth)
CHARGE_TYPES: tuple[str, ...] = get_args(ChargeType)
USB_TYPES: tuple[str, ...] = get_args(UsbType)
NETWORK_INTERFACE_TYPES: tuple[str, ...] = get_args(NetworkInterfaceType)
BLOCK_DEVICE_TYPES: tuple[str, ...] = get_args(BlockDeviceType)
RFKILL_TYPES: tuple[str, ...] = get_args(RfKillType)
