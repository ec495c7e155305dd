from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime

from settingsync.enumerators import GraphicsAdapter, NetworkInterface, TimezoneEntry

FIXED_NOW = datetime(2024, 5, 17, 12, 0, 0)


def fixed_clock() -> datetime:
    return FIXED_NOW


class FakeHardware:
    def __init__(self, adapters: Iterable[GraphicsAdapter] = (), gate: threading.Event | None = None):
        self.adapters = list(adapters)
        self.gate = gate
        self.calls = 0

    def list_adapters(self) -> list[GraphicsAdapter]:
        self.calls += 1
        if self.gate is not None:
            self.gate.wait(5)
        return list(self.adapters)


class FailingHardware:
    def list_adapters(self):
        raise RuntimeError("driver crashed")


class FakeNetwork:
    def __init__(self, interfaces: Iterable[NetworkInterface] = (), gate: threading.Event | None = None):
        self.interfaces = list(interfaces)
        self.gate = gate

    def list_interfaces(self) -> list[NetworkInterface]:
        if self.gate is not None:
            self.gate.wait(5)
        return list(self.interfaces)


class FakeTimezones:
    def __init__(self, entries: Iterable[TimezoneEntry] = ()):
        self.entries = list(entries)

    def list_entries(self) -> Iterator[TimezoneEntry]:
        yield from self.entries


class FakeAudio:
    def __init__(self, supported: Mapping[str, bool] | None = None):
        self.flags = dict(supported or {})

    def supported(self) -> Mapping[str, bool]:
        return dict(self.flags)


class RecordingSink:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def info(self, message: str) -> None:
        self.messages.append(message)


class RecordingDriver:
    def __init__(self) -> None:
        self.calls: list[bool] = []

    def toggle_threading(self, disabled: bool) -> None:
        self.calls.append(disabled)


GPUS = [
    GraphicsAdapter("0x10de_0x2484", "NVIDIA GeForce RTX 3070", is_discrete=True),
    GraphicsAdapter("0x8086_0x4680", "Intel UHD Graphics 770"),
]

INTERFACES = [
    NetworkInterface("eth0", "eth0"),
    NetworkInterface("wlan0", "wlan0"),
]

ZONES = [
    TimezoneEntry(-18000, "America/New_York", "EST"),
    TimezoneEntry(-10800, "America/Sao_Paulo", "-03"),
    TimezoneEntry(0, "UTC", "UTC"),
    TimezoneEntry(3600, "Europe/Berlin", "CET"),
    TimezoneEntry(19800, "Asia/Kolkata", "IST"),
]
