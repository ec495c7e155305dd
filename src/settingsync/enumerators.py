"""Runtime discovery of hardware, network and locale options.

Each capability is a small protocol so that hosts can plug in their own
probes.  The default implementations query the local machine and may take
arbitrarily long; they are only ever called from enrichment workers.
"""

from __future__ import annotations

import ctypes.util
import logging
import re
import shutil
import subprocess
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

import psutil

logger = logging.getLogger("settingsync.enumerators")


@dataclass(frozen=True)
class GraphicsAdapter:
    id: str
    name: str
    is_discrete: bool = False


@dataclass(frozen=True)
class NetworkInterface:
    name: str
    id: str


@dataclass(frozen=True)
class TimezoneEntry:
    utc_offset_seconds: int
    location: str
    abbreviation: str


class HardwareEnumerator(Protocol):
    def list_adapters(self) -> Sequence[GraphicsAdapter]:
        ...


class NetworkEnumerator(Protocol):
    def list_interfaces(self) -> Sequence[NetworkInterface]:
        ...


class TimezoneSource(Protocol):
    def list_entries(self) -> Iterable[TimezoneEntry]:
        ...


class AudioBackendProbe(Protocol):
    def supported(self) -> Mapping[str, bool]:
        """Return support flags keyed by audio backend name."""


# ---------------------------------------------------------------------------
# Graphics adapters
# ---------------------------------------------------------------------------


class StaticHardwareEnumerator:
    """Enumerator returning a fixed adapter list."""

    def __init__(self, adapters: Iterable[GraphicsAdapter] = ()) -> None:
        self._adapters = tuple(adapters)

    def list_adapters(self) -> Sequence[GraphicsAdapter]:
        return self._adapters


_VK_FIELD = re.compile(r"^\s*(\w+)\s*=\s*(.*?)\s*$")


def parse_vulkaninfo_summary(text: str) -> list[GraphicsAdapter]:
    """Parse the ``Devices`` block of ``vulkaninfo --summary``."""

    adapters: list[GraphicsAdapter] = []
    current: dict[str, str] | None = None

    def flush() -> None:
        if current and "deviceName" in current:
            vendor = current.get("vendorID", "0x0")
            device = current.get("deviceID", "0x0")
            adapters.append(
                GraphicsAdapter(
                    id=f"{vendor}_{device}",
                    name=current["deviceName"],
                    is_discrete=current.get("deviceType", "").endswith("DISCRETE_GPU"),
                )
            )

    for line in text.splitlines():
        if re.match(r"^GPU\d+:\s*$", line.strip()):
            flush()
            current = {}
            continue
        if current is None:
            continue
        match = _VK_FIELD.match(line)
        if match:
            current[match.group(1)] = match.group(2)
    flush()
    return adapters


class VulkanInfoEnumerator:
    """List Vulkan physical devices through the ``vulkaninfo`` tool.

    A missing tool or a failing run yields no adapters, which the graphics
    pipeline reports as Vulkan being unavailable.
    """

    def __init__(self, executable: str = "vulkaninfo", timeout: float = 20.0) -> None:
        self.executable = executable
        self.timeout = timeout

    def list_adapters(self) -> Sequence[GraphicsAdapter]:
        exe = shutil.which(self.executable)
        if exe is None:
            logger.debug("%s not found on PATH", self.executable)
            return []
        try:
            proc = subprocess.run(
                [exe, "--summary"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("vulkaninfo failed: %s", exc)
            return []
        if proc.returncode != 0:
            logger.debug("vulkaninfo exited with %s", proc.returncode)
            return []
        return parse_vulkaninfo_summary(proc.stdout)


# ---------------------------------------------------------------------------
# Network interfaces
# ---------------------------------------------------------------------------


class PsutilNetworkEnumerator:
    def list_interfaces(self) -> Sequence[NetworkInterface]:
        return [NetworkInterface(name=name, id=name) for name in psutil.net_if_addrs()]


# ---------------------------------------------------------------------------
# Time zones
# ---------------------------------------------------------------------------


class ZoneInfoTimezoneSource:
    """Time zone table built from the IANA database via :mod:`zoneinfo`.

    Entries are produced lazily, one location at a time, in alphabetical
    order.
    """

    def __init__(self, when: datetime | None = None) -> None:
        self.when = when

    def list_entries(self) -> Iterator[TimezoneEntry]:
        from zoneinfo import ZoneInfo, available_timezones

        moment = self.when or datetime.now(timezone.utc)
        for location in sorted(available_timezones()):
            try:
                local = moment.astimezone(ZoneInfo(location))
            except (OSError, ValueError) as exc:
                logger.debug("skipping zone %s: %s", location, exc)
                continue
            offset = local.utcoffset()
            yield TimezoneEntry(
                utc_offset_seconds=int(offset.total_seconds()) if offset else 0,
                location=location,
                abbreviation=local.tzname() or "",
            )


# ---------------------------------------------------------------------------
# Audio backends
# ---------------------------------------------------------------------------

AUDIO_LIBRARIES = {"OpenAl": "openal", "SoundIo": "soundio", "SDL2": "SDL2"}


class LibraryAudioProbe:
    """Report an audio backend as supported when its shared library is found."""

    def supported(self) -> Mapping[str, bool]:
        return {
            backend: ctypes.util.find_library(lib) is not None
            for backend, lib in AUDIO_LIBRARIES.items()
        }


__all__ = [
    "AUDIO_LIBRARIES",
    "AudioBackendProbe",
    "GraphicsAdapter",
    "HardwareEnumerator",
    "LibraryAudioProbe",
    "NetworkEnumerator",
    "NetworkInterface",
    "PsutilNetworkEnumerator",
    "StaticHardwareEnumerator",
    "TimezoneEntry",
    "TimezoneSource",
    "VulkanInfoEnumerator",
    "ZoneInfoTimezoneSource",
    "parse_vulkaninfo_summary",
]
