from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def _iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _envelope(device_id: str, ts: datetime, frequency: str, data: dict) -> dict[str, Any]:
    return {
        "deviceId": device_id,
        "timestamp": _iso(ts),
        "timestampMs": int(ts.timestamp() * 1000),
        "frequency": frequency,
        "data": data,
    }


def high_frequency_data(*, capacity: int = 80, cpu_temp: float = 41.5) -> dict[str, Any]:
    return {
        "power": {
            "battery": {
                "capacity": capacity,
                "status": "Discharging",
                "voltage": 3.92,
                "current": -0.41,
                "temperature": 31.2,
                "chargeFull": 2850000,
                "chargeFullDesign": 3000000,
                "health": "Good",
                "present": True,
                "chargeType": "Standard",
                "energyFullDesign": 11.4,
            },
            "usbInput": {
                "present": False,
                "health": "Good",
                "inputCurrentLimit": 0.5,
                "inputVoltageLimit": 5.0,
            },
            "usbCPd": {
                "online": False,
                "voltage": 0.0,
                "voltageMin": 5.0,
                "voltageMax": 20.0,
                "current": 0.0,
                "currentMax": 3.0,
                "usbType": "C",
            },
            "typeCPort": {
                "dataRole": "[device]",
                "powerRole": "[sink]",
                "orientation": "normal",
                "powerOperationMode": "default",
                "vconnSource": False,
            },
        },
        "thermal": {
            "zones": [
                {
                    "zone": 0,
                    "type": "cpu0-thermal",
                    "temperature": cpu_temp,
                    "tripPoints": [{"index": 0, "temperature": 85.0, "type": "passive"}],
                },
                {"zone": 1, "type": "gpu-thermal", "temperature": 38.0},
            ],
            "coolingDevices": [
                {"index": 0, "type": "thermal-cpufreq-0", "currentState": 0, "maxState": 5}
            ],
            "batteryTemp": 31.2,
            "cpuTemp": cpu_temp,
            "gpuTemp": 38.0,
        },
        "cpu": {
            "frequencies": [
                {
                    "cpu": index,
                    "currentFreq": 1008000,
                    "minFreq": 408000,
                    "maxFreq": 1416000,
                    "hardwareMinFreq": 408000,
                    "hardwareMaxFreq": 1416000,
                    "governor": "schedutil",
                }
                for index in range(2)
            ],
            "cpuTimes": [
                {
                    "cpu": name,
                    "user": "12345678901",
                    "nice": 10,
                    "system": 2000,
                    "idle": 900000,
                    "iowait": 120,
                    "irq": 0,
                    "softirq": 33,
                    "steal": 0,
                }
                for name in ("cpu", "cpu0", "cpu1")
            ],
            "loadAverage": {
                "load1": 0.52,
                "load5": 0.61,
                "load15": 0.58,
                "runningProcesses": 2,
                "totalProcesses": 311,
            },
            "uptime": 86400.5,
            "idleTime": 300000.2,
            "onlineCpus": [0, 1],
            "offlineCpus": [2, 3],
        },
        "memory": {
            "total": 3900000000,
            "free": 800000000,
            "available": 1900000000,
            "buffers": 50000000,
            "cached": 900000000,
            "swapTotal": 2000000000,
            "swapFree": 1800000000,
            "swapUsed": 200000000,
            "active": 1200000000,
            "inactive": 700000000,
            "activeAnon": 600000000,
            "inactiveAnon": 100000000,
            "activeFile": 600000000,
            "inactiveFile": 600000000,
            "dirty": 1000,
            "writeback": 0,
            "anonPages": 650000000,
            "mapped": 300000000,
            "shmem": 20000000,
            "slab": 120000000,
            "sReclaimable": 60000000,
            "sUnreclaim": 60000000,
            "usedPercent": 51.3,
            "swapUsedPercent": 10.0,
        },
        "network": {
            "interfaces": [
                {
                    "name": "wlan0",
                    "address": "02:00:00:00:00:01",
                    "carrier": True,
                    "carrierChanges": 4,
                    "operstate": "up",
                    "mtu": 1500,
                    "type": "wifi",
                    "stats": {
                        "rxBytes": 1048576,
                        "txBytes": 524288,
                        "rxPackets": 900,
                        "txPackets": 700,
                        "rxErrors": 0,
                        "txErrors": 0,
                        "rxDropped": 1,
                        "txDropped": 0,
                        "rxFifo": 0,
                        "txFifo": 0,
                        "rxFrame": 0,
                        "txCarrier": 0,
                        "collisions": 0,
                    },
                }
            ],
            "wifi": {"signalStrength": -58, "linkQuality": 52, "ssid": "lab-net", "frequency": 5180},
            "totalRxBytes": 1048576,
            "totalTxBytes": 524288,
        },
    }


def block_device(name: str, *, device_type: str = "emmc", partitions: list | None = None) -> dict:
    device: dict[str, Any] = {
        "name": name,
        "type": device_type,
        "size": 31268536320,
        "stats": {
            "readsCompleted": 1000,
            "readsMerged": 10,
            "sectorsRead": 80000,
            "readTimeMs": 500,
            "writesCompleted": 400,
            "writesMerged": 4,
            "sectorsWritten": 30000,
            "writeTimeMs": 900,
            "iosInProgress": 0,
            "ioTimeMs": 1300,
            "weightedIoTimeMs": 1400,
        },
        "bytesRead": 40960000,
        "bytesWritten": 15360000,
    }
    if partitions is not None:
        device["partitions"] = partitions
    return device


def process(pid: int, *, memory_percent: float, cpu_percent: float | None = 1.5) -> dict:
    return {
        "pid": pid,
        "name": f"proc-{pid}",
        "state": "S",
        "ppid": 1,
        "pgrp": pid,
        "session": pid,
        "userTimeMs": 1200,
        "systemTimeMs": 300,
        "totalCpuTimeMs": 1500,
        "cpuPercent": cpu_percent,
        "vsize": 120000000,
        "rss": 40000000,
        "rssLimit": 4294967295,
        "memoryPercent": memory_percent,
        "numThreads": 4,
        "nice": 0,
        "priority": 20,
        "startTime": 1234.5,
        "cmdline": f"/usr/bin/proc-{pid} --daemon",
        "oomScore": 100,
    }


def medium_frequency_data(
    *, processes: list[dict] | None = None, devices: list[dict] | None = None
) -> dict[str, Any]:
    processes = processes if processes is not None else [process(100, memory_percent=2.5)]
    devices = devices if devices is not None else [block_device("mmcblk0")]
    return {
        "cpuStats": {
            "frequencyStats": [
                {
                    "cpu": 0,
                    "timeInState": [
                        {"frequency": 408000, "timeMs": 50000},
                        {"frequency": 1416000, "timeMs": 9000},
                    ],
                    "totalTransitions": 812,
                }
            ],
            "idleStats": [
                {
                    "cpu": 0,
                    "states": [
                        {
                            "index": 0,
                            "name": "WFI",
                            "description": "ARM WFI",
                            "usage": 10000,
                            "timeUs": 9000000,
                            "latencyUs": 1,
                        }
                    ],
                }
            ],
        },
        "gpu": {
            "frequency": {
                "currentFreq": 300000000,
                "targetFreq": 300000000,
                "minFreq": 200000000,
                "maxFreq": 600000000,
                "governor": "simple_ondemand",
                "availableFrequencies": [200000000, 300000000, 600000000],
                "pollingIntervalMs": 50,
            },
            "transitionStats": [{"fromFreq": 200000000, "toFreq": 300000000, "count": 42}],
            "totalTransitions": 42,
        },
        "storage": {
            "devices": devices,
            "totalBytesRead": 40960000,
            "totalBytesWritten": 15360000,
            "totalIoTimeMs": 1300,
        },
        "processes": {
            "processes": processes,
            "summary": {"total": len(processes), "running": 1, "sleeping": len(processes) - 1, "zombie": 0, "stopped": 0},
            "totalCpuTime": 987654,
            "contextSwitches": 123456789,
            "processesCreated": 4567,
        },
    }


def _vector(x: float, y: float, z: float) -> dict[str, float]:
    return {"x": x, "y": y, "z": z}


def low_frequency_data(*, brightness_percent: float = 45.0) -> dict[str, Any]:
    return {
        "sensors": {
            "ambientLight": {"illuminanceRaw": 120, "illuminanceScale": 0.5, "illuminanceLux": 60.0},
            "proximity": {"proximityRaw": 3, "proximityScale": 1.0, "nearLevel": 10, "isNear": False},
            "accelerometer": {
                "raw": _vector(10, -20, 16000),
                "scale": 0.000598,
                "acceleration": _vector(0.006, -0.012, 9.57),
                "magnitude": 9.57,
            },
            "gyroscope": {
                "raw": _vector(1, 2, 3),
                "scale": 0.0001,
                "angularVelocity": _vector(0.0001, 0.0002, 0.0003),
                "magnitude": 0.00037,
            },
            "magnetometer": {
                "raw": _vector(100, 200, -300),
                "scale": 0.1,
                "magneticField": _vector(10.0, 20.0, -30.0),
                "heading": 63.4,
            },
            "adcChannels": [{"channel": 0, "raw": 2048, "scale": 0.8, "voltage": 1.64}],
        },
        "system": {
            "display": {
                "brightness": 1000,
                "maxBrightness": 4000,
                "brightnessPercent": brightness_percent,
                "power": True,
            },
            "leds": [{"name": "red:indicator", "brightness": 0, "maxBrightness": 255, "trigger": "none"}],
            "rfkill": [
                {"type": "wifi", "name": "phy0", "softBlocked": False, "hardBlocked": False},
                {"type": "bluetooth", "name": "hci0", "softBlocked": True, "hardBlocked": False},
            ],
            "wakeupCount": 321,
        },
    }


def high_payload(device_id: str, ts: datetime, **kwargs: Any) -> dict[str, Any]:
    return _envelope(device_id, ts, "high", high_frequency_data(**kwargs))


def medium_payload(device_id: str, ts: datetime, **kwargs: Any) -> dict[str, Any]:
    return _envelope(device_id, ts, "medium", medium_frequency_data(**kwargs))


def low_payload(device_id: str, ts: datetime, **kwargs: Any) -> dict[str, Any]:
    return _envelope(device_id, ts, "low", low_frequency_data(**kwargs))
