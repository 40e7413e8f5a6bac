from __future__ import annotations

import argparse
from datetime import datetime, timedelta, timezone
import json
import os
import random
from urllib import error, request

DEFAULT_API_URL = os.getenv("TELEMETRY_BASE_URL", "http://localhost:8000")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Mock phone telemetry client - sends high/medium/low payloads to the server"
    )
    parser.add_argument("--device-id", required=True, help="External device identifier")
    parser.add_argument(
        "--minutes",
        type=int,
        default=30,
        help="Span of backdated telemetry to generate, ending now (default: 30)",
    )
    parser.add_argument("--high-interval", type=int, default=10, help="Seconds between high-tier samples")
    parser.add_argument("--medium-interval", type=int, default=60, help="Seconds between medium-tier samples")
    parser.add_argument("--low-interval", type=int, default=300, help="Seconds between low-tier samples")
    parser.add_argument(
        "--batch",
        action="store_true",
        help="Flush everything through /api/telemetry/batch like an offline buffer",
    )
    parser.add_argument("--batch-size", type=int, default=50, help="Payloads per batch request")
    parser.add_argument(
        "--api-url",
        default=DEFAULT_API_URL,
        help=f"Server URL (default: {DEFAULT_API_URL})",
    )
    parser.add_argument("--random-seed", type=int, default=None, help="Seed for reproducible data")
    return parser.parse_args()


def _iso(ts: datetime) -> str:
    return ts.isoformat().replace("+00:00", "Z")


def _envelope(device_id: str, ts: datetime, frequency: str, data: dict) -> dict:
    return {
        "deviceId": device_id,
        "timestamp": _iso(ts),
        "timestampMs": int(ts.timestamp() * 1000),
        "frequency": frequency,
        "data": data,
    }


def generate_high(rng: random.Random, elapsed: float, capacity: int) -> dict:
    cpu_temp = round(rng.gauss(45, 4), 1)
    load1 = round(abs(rng.gauss(0.8, 0.4)), 2)
    total = 3_900_000_000
    available = int(total * rng.uniform(0.35, 0.6))
    rx = int(elapsed * rng.uniform(2_000, 20_000))
    tx = int(rx * rng.uniform(0.1, 0.4))
    return {
        "power": {
            "battery": {
                "capacity": capacity,
                "status": "Discharging",
                "voltage": round(3.4 + capacity / 100 * 0.8, 3),
                "current": round(-rng.uniform(0.2, 0.9), 3),
                "temperature": round(rng.gauss(31, 1.5), 1),
                "chargeFull": 2_850_000,
                "chargeFullDesign": 3_000_000,
                "health": "Good",
                "present": True,
                "chargeType": "Unknown",
                "energyFullDesign": 11.4,
            },
            "usbInput": {"present": False, "health": "Good", "inputCurrentLimit": 0.5, "inputVoltageLimit": 5.0},
            "usbCPd": {
                "online": False,
                "voltage": 0.0,
                "voltageMin": 5.0,
                "voltageMax": 5.0,
                "current": 0.0,
                "currentMax": 3.0,
                "usbType": "C",
            },
            "typeCPort": {
                "dataRole": "[device]",
                "powerRole": "[sink]",
                "orientation": "unknown",
                "powerOperationMode": "default",
                "vconnSource": False,
            },
        },
        "thermal": {
            "zones": [
                {"zone": 0, "type": "cpu0-thermal", "temperature": cpu_temp},
                {"zone": 1, "type": "gpu0-thermal", "temperature": round(cpu_temp - 3, 1)},
            ],
            "coolingDevices": [
                {"index": 0, "type": "thermal-cpufreq-0", "currentState": 0, "maxState": 5}
            ],
            "batteryTemp": round(rng.gauss(31, 1.5), 1),
            "cpuTemp": cpu_temp,
            "gpuTemp": round(cpu_temp - 3, 1),
        },
        "cpu": {
            "frequencies": [
                {
                    "cpu": cpu,
                    "currentFreq": rng.choice([648000, 816000, 1008000, 1152000]),
                    "minFreq": 648000,
                    "maxFreq": 1152000,
                    "hardwareMinFreq": 648000,
                    "hardwareMaxFreq": 1152000,
                    "governor": "schedutil",
                }
                for cpu in range(4)
            ],
            "cpuTimes": [
                {
                    "cpu": name,
                    "user": int(elapsed * 40),
                    "nice": 0,
                    "system": int(elapsed * 15),
                    "idle": int(elapsed * 300),
                    "iowait": int(elapsed * 2),
                    "irq": 0,
                    "softirq": int(elapsed),
                    "steal": 0,
                }
                for name in ("cpu", "cpu0", "cpu1", "cpu2", "cpu3")
            ],
            "loadAverage": {
                "load1": load1,
                "load5": round(load1 * 0.9, 2),
                "load15": round(load1 * 0.8, 2),
                "runningProcesses": rng.randint(1, 4),
                "totalProcesses": rng.randint(280, 340),
            },
            "uptime": round(elapsed, 2),
            "idleTime": round(elapsed * 3.1, 2),
            "onlineCpus": [0, 1, 2, 3],
            "offlineCpus": [],
        },
        "memory": {
            "total": total,
            "free": available // 2,
            "available": available,
            "buffers": 40_000_000,
            "cached": available // 2,
            "swapTotal": 2_000_000_000,
            "swapFree": 1_900_000_000,
            "swapUsed": 100_000_000,
            "active": 1_200_000_000,
            "inactive": 700_000_000,
            "activeAnon": 600_000_000,
            "inactiveAnon": 100_000_000,
            "activeFile": 600_000_000,
            "inactiveFile": 600_000_000,
            "dirty": rng.randint(0, 5000),
            "writeback": 0,
            "anonPages": 650_000_000,
            "mapped": 300_000_000,
            "shmem": 20_000_000,
            "slab": 120_000_000,
            "sReclaimable": 60_000_000,
            "sUnreclaim": 60_000_000,
            "usedPercent": round((total - available) / total * 100, 2),
            "swapUsedPercent": 5.0,
        },
        "network": {
            "interfaces": [
                {
                    "name": "wlan0",
                    "address": "02:ba:7c:9c:cc:78",
                    "carrier": True,
                    "carrierChanges": 2,
                    "operstate": "up",
                    "mtu": 1500,
                    "type": "wifi",
                    "stats": {
                        "rxBytes": rx,
                        "txBytes": tx,
                        "rxPackets": rx // 1200,
                        "txPackets": tx // 600,
                        "rxErrors": 0,
                        "txErrors": 0,
                        "rxDropped": 0,
                        "txDropped": 0,
                        "rxFifo": 0,
                        "txFifo": 0,
                        "rxFrame": 0,
                        "txCarrier": 0,
                        "collisions": 0,
                    },
                }
            ],
            "wifi": {
                "signalStrength": rng.randint(-75, -45),
                "linkQuality": rng.randint(40, 70),
                "ssid": "home",
                "frequency": 2437,
                "bitrate": 72.2,
            },
            "totalRxBytes": rx,
            "totalTxBytes": tx,
        },
    }


def _block_stats(rng: random.Random) -> dict:
    return {
        "readsCompleted": rng.randint(1_000, 100_000),
        "readsMerged": rng.randint(0, 1_000),
        "sectorsRead": rng.randint(100_000, 10_000_000),
        "readTimeMs": rng.randint(1_000, 100_000),
        "writesCompleted": rng.randint(1_000, 50_000),
        "writesMerged": rng.randint(0, 1_000),
        "sectorsWritten": rng.randint(100_000, 5_000_000),
        "writeTimeMs": rng.randint(1_000, 100_000),
        "iosInProgress": 0,
        "ioTimeMs": rng.randint(1_000, 200_000),
        "weightedIoTimeMs": rng.randint(1_000, 300_000),
    }


def generate_medium(rng: random.Random) -> dict:
    names = ["phosh", "gnome-shell", "firefox", "modem-manager", "pulseaudio", "chatty", "calls", "squeekboard"]
    processes = [
        {
            "pid": 400 + index,
            "name": name,
            "state": rng.choice(["S", "S", "R"]),
            "ppid": 1,
            "pgrp": 400 + index,
            "session": 400 + index,
            "userTimeMs": rng.randint(100, 100_000),
            "systemTimeMs": rng.randint(100, 50_000),
            "totalCpuTimeMs": rng.randint(200, 150_000),
            "cpuPercent": round(rng.uniform(0, 25), 2),
            "vsize": rng.randint(50_000_000, 900_000_000),
            "rss": rng.randint(5_000_000, 400_000_000),
            "rssLimit": 2**63 - 1,
            "memoryPercent": round(rng.uniform(0.1, 12), 2),
            "numThreads": rng.randint(1, 40),
            "nice": 0,
            "priority": 20,
            "startTime": round(rng.uniform(5, 500), 2),
            "cmdline": f"/usr/bin/{name}",
            "oomScore": rng.randint(0, 800),
        }
        for index, name in enumerate(names)
    ]
    partitions = [
        {
            "name": f"mmcblk2p{index}",
            "type": "emmc",
            "size": size,
            "stats": _block_stats(rng),
            "bytesRead": rng.randint(1_000_000, 100_000_000),
            "bytesWritten": rng.randint(1_000_000, 50_000_000),
        }
        for index, size in ((1, 268_435_456), (2, 31_000_000_000))
    ]
    return {
        "cpuStats": {
            "frequencyStats": [
                {
                    "cpu": 0,
                    "timeInState": [
                        {"frequency": 648000, "timeMs": rng.randint(10_000, 500_000)},
                        {"frequency": 1152000, "timeMs": rng.randint(1_000, 100_000)},
                    ],
                    "totalTransitions": rng.randint(100, 10_000),
                }
            ],
        },
        "gpu": {
            "frequency": {
                "currentFreq": rng.choice([240000000, 312000000, 432000000]),
                "targetFreq": 312000000,
                "minFreq": 240000000,
                "maxFreq": 432000000,
                "governor": "simple_ondemand",
                "availableFrequencies": [240000000, 312000000, 432000000],
                "pollingIntervalMs": 50,
            },
        },
        "storage": {
            "devices": [
                {
                    "name": "mmcblk2",
                    "type": "emmc",
                    "size": 31_268_536_320,
                    "stats": _block_stats(rng),
                    "bytesRead": sum(p["bytesRead"] for p in partitions),
                    "bytesWritten": sum(p["bytesWritten"] for p in partitions),
                    "partitions": partitions,
                }
            ],
            "totalBytesRead": sum(p["bytesRead"] for p in partitions),
            "totalBytesWritten": sum(p["bytesWritten"] for p in partitions),
            "totalIoTimeMs": rng.randint(1_000, 200_000),
        },
        "processes": {
            "processes": processes,
            "summary": {"total": len(processes), "running": 1, "sleeping": len(processes) - 1, "zombie": 0, "stopped": 0},
            "totalCpuTime": sum(p["totalCpuTimeMs"] for p in processes),
            "contextSwitches": rng.randint(1_000_000, 50_000_000),
            "processesCreated": rng.randint(1_000, 20_000),
        },
    }


def _vector(rng: random.Random, scale: float) -> dict:
    return {axis: round(rng.gauss(0, scale), 4) for axis in ("x", "y", "z")}


def generate_low(rng: random.Random) -> dict:
    brightness = rng.randint(100, 4000)
    return {
        "sensors": {
            "ambientLight": {
                "illuminanceRaw": rng.randint(0, 4000),
                "illuminanceScale": 0.5,
                "illuminanceLux": round(rng.uniform(0, 2000), 1),
            },
            "proximity": {"proximityRaw": rng.randint(0, 50), "proximityScale": 1.0, "nearLevel": 40, "isNear": False},
            "accelerometer": {
                "raw": _vector(rng, 100),
                "scale": 0.000598,
                "acceleration": {"x": 0.1, "y": 0.2, "z": 9.8},
                "magnitude": 9.80,
            },
            "gyroscope": {
                "raw": _vector(rng, 10),
                "scale": 0.000153,
                "angularVelocity": _vector(rng, 0.01),
                "magnitude": 0.01,
            },
            "magnetometer": {
                "raw": _vector(rng, 500),
                "scale": 0.1,
                "magneticField": _vector(rng, 50),
                "heading": round(rng.uniform(0, 360), 1),
            },
            "adcChannels": [],
        },
        "system": {
            "display": {
                "brightness": brightness,
                "maxBrightness": 4000,
                "brightnessPercent": round(brightness / 40, 1),
                "power": True,
            },
            "leds": [{"name": "white:flash", "brightness": 0, "maxBrightness": 255, "trigger": "none"}],
            "rfkill": [
                {"type": "wifi", "name": "phy0", "softBlocked": False, "hardBlocked": False},
                {"type": "bluetooth", "name": "hci0", "softBlocked": False, "hardBlocked": False},
                {"type": "wwan", "name": "modem", "softBlocked": False, "hardBlocked": False},
            ],
            "wakeupCount": rng.randint(0, 5000),
        },
    }


def build_payloads(args: argparse.Namespace, rng: random.Random) -> list[dict]:
    end = datetime.now(timezone.utc).replace(microsecond=0)
    start = end - timedelta(minutes=args.minutes)
    boot_uptime = rng.uniform(3_600, 86_400)
    capacity = rng.randint(60, 100)
    samples: list[tuple[datetime, str]] = []
    for frequency, interval in (
        ("high", args.high_interval),
        ("medium", args.medium_interval),
        ("low", args.low_interval),
    ):
        ts = start
        while ts <= end:
            samples.append((ts, frequency))
            ts += timedelta(seconds=interval)
    samples.sort()

    payloads = []
    for ts, frequency in samples:
        elapsed = boot_uptime + (ts - start).total_seconds()
        if frequency == "high":
            capacity = max(1, capacity - (1 if rng.random() < 0.05 else 0))
            data = generate_high(rng, elapsed, capacity)
        elif frequency == "medium":
            data = generate_medium(rng)
        else:
            data = generate_low(rng)
        payloads.append(_envelope(args.device_id, ts, frequency, data))
    return payloads


def post_json(api_url: str, path: str, payload: dict) -> dict:
    url = f"{api_url.rstrip('/')}{path}"
    req = request.Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        method="POST",
        headers={"Content-Type": "application/json"},
    )
    try:
        with request.urlopen(req, timeout=30) as response:
            data = response.read().decode("utf-8")
            return json.loads(data) if data else {}
    except error.HTTPError as exc:
        try:
            detail = json.loads(exc.read().decode("utf-8")).get("error", str(exc))
        except ValueError:
            detail = f"HTTP {exc.code}"
        raise SystemExit(f"Failed to send telemetry: {detail}")


def main() -> None:
    args = parse_args()
    rng = random.Random(args.random_seed)
    payloads = build_payloads(args, rng)
    print(f"Generated {len(payloads)} payloads for device '{args.device_id}'")

    if args.batch:
        ids: list[str] = []
        for offset in range(0, len(payloads), args.batch_size):
            chunk = payloads[offset : offset + args.batch_size]
            result = post_json(args.api_url, "/api/telemetry/batch", {"payloads": chunk})
            ids.extend(result.get("data", {}).get("ids", []))
        print(f"Success: {len(ids)} readings stored via batch")
        return

    for payload in payloads:
        post_json(args.api_url, "/api/telemetry", payload)
    print(f"Success: {len(payloads)} readings stored")


if __name__ == "__main__":
    main()
