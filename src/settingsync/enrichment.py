"""Background pipelines filling runtime-only option lists.

A pipeline runs once per view-state session on a worker thread.  It owns
a single option list (or a set of availability flags), asks its enumerator
for entries, appends them in enumeration order and finally resolves the
field's selection from the stored value it captured when it started.

Pipelines never fail the session: enumerator errors are logged and
treated as an empty result, and writes against a discarded view-state are
ignored by :class:`~settingsync.state.ViewState`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from .enumerators import (
    AudioBackendProbe,
    GraphicsAdapter,
    HardwareEnumerator,
    NetworkEnumerator,
    TimezoneEntry,
    TimezoneSource,
)
from .state import OPENGL_INDEX, ViewState
from .store import ConfigStore

logger = logging.getLogger("settingsync.enrichment")

T = TypeVar("T")

PREFERRED_GPU_KEY = "graphics.preferred_gpu"
LAN_INTERFACE_KEY = "multiplayer.lan_interface_id"
TIME_ZONE_KEY = "system.time_zone"
DEFAULT_INTERFACE_KEY = "0"


def adapter_label(adapter: GraphicsAdapter) -> str:
    return f"{adapter.name} (dGPU)" if adapter.is_discrete else adapter.name


def format_utc_offset(seconds: int) -> str:
    sign = "-" if seconds < 0 else "+"
    hours, rest = divmod(abs(int(seconds)), 3600)
    return f"UTC{sign}{hours:02d}:{rest // 60:02d}"


def time_zone_label(entry: TimezoneEntry) -> str:
    abbr = entry.abbreviation
    if abbr.startswith(("+", "-")):
        abbr = ""
    parts = (format_utc_offset(entry.utc_offset_seconds), entry.location, abbr)
    return " ".join(p for p in parts if p)


class EnrichmentPipeline(ABC):
    """Single-shot producer for one slice of the view-state."""

    name = "pipeline"

    def run(self, state: ViewState, store: ConfigStore) -> bool:
        """Populate *state*; return ``False`` if the session went stale."""

        session = state.session_id
        generation = state.generation
        logger.debug("%s started for session %s", self.name, session)
        self.populate(state, store, session, generation)
        live = not state.closed and state.session_id == session
        logger.debug("%s finished (live=%s)", self.name, live)
        return live

    @abstractmethod
    def populate(
        self, state: ViewState, store: ConfigStore, session: str, generation: int
    ) -> None:
        pass

    def _collect(self, producer: Callable[[], Iterable[T]]) -> list[T]:
        try:
            return list(producer())
        except Exception as exc:
            logger.warning("%s enumeration failed: %s", self.name, exc)
            return []


class GpuPipeline(EnrichmentPipeline):
    """List graphics adapters; without any adapter Vulkan is unavailable."""

    name = "gpus"

    def __init__(self, hardware: HardwareEnumerator) -> None:
        self.hardware = hardware

    def populate(self, state, store, session, generation) -> None:
        preferred = store.get(PREFERRED_GPU_KEY)
        if not state.reset_options(session, "gpus"):
            return
        adapters = self._collect(self.hardware.list_adapters)
        if not adapters:
            logger.info("no Vulkan capable adapters found, falling back to OpenGL")
            state.set_availability(session, "is_vulkan_available", False)
            state.apply_fallback(session, "graphics_backend", OPENGL_INDEX)
        else:
            state.set_availability(session, "is_vulkan_available", True)
            for adapter in adapters:
                if not state.append_option(session, "gpus", adapter_label(adapter), adapter.id):
                    return
        state.resolve_selection(
            session, "gpus", None if preferred is None else str(preferred), generation
        )


class NetworkInterfacePipeline(EnrichmentPipeline):
    """List LAN interfaces behind a leading "use default interface" entry."""

    name = "network_interfaces"

    def __init__(self, network: NetworkEnumerator, default_label: str = "Default") -> None:
        self.network = network
        self.default_label = default_label

    def populate(self, state, store, session, generation) -> None:
        lan_id = store.get(LAN_INTERFACE_KEY)
        sentinel = (self.default_label, DEFAULT_INTERFACE_KEY)
        if not state.reset_options(session, "network_interfaces", sentinel=sentinel):
            return
        for iface in self._collect(self.network.list_interfaces):
            if not state.append_option(session, "network_interfaces", iface.name, iface.id):
                return
        state.resolve_selection(
            session,
            "network_interfaces",
            None if lan_id is None else str(lan_id),
            generation,
        )


class TimeZonePipeline(EnrichmentPipeline):
    """Stream the time zone table into the ``time_zones`` list."""

    name = "time_zones"

    def __init__(self, source: TimezoneSource) -> None:
        self.source = source

    def populate(self, state, store, session, generation) -> None:
        zone = store.get(TIME_ZONE_KEY)
        if not state.reset_options(session, "time_zones"):
            return
        try:
            for entry in self.source.list_entries():
                if not state.append_option(
                    session, "time_zones", time_zone_label(entry), entry.location
                ):
                    return
        except Exception as exc:
            logger.warning("%s enumeration failed: %s", self.name, exc)
        state.resolve_selection(session, "time_zones", zone, generation)


AUDIO_FLAGS = (
    ("OpenAl", "is_openal_enabled"),
    ("SoundIo", "is_soundio_enabled"),
    ("SDL2", "is_sdl2_enabled"),
)


class AudioBackendPipeline(EnrichmentPipeline):
    """Publish which audio backends the host supports."""

    name = "audio_backends"

    def __init__(self, probe: AudioBackendProbe) -> None:
        self.probe = probe

    def populate(self, state, store, session, generation) -> None:
        pairs: list[tuple[str, Any]] = self._collect(lambda: self.probe.supported().items())
        supported = dict(pairs)
        for backend, flag in AUDIO_FLAGS:
            if not state.set_availability(session, flag, bool(supported.get(backend, False))):
                return


__all__ = [
    "AUDIO_FLAGS",
    "AudioBackendPipeline",
    "EnrichmentPipeline",
    "GpuPipeline",
    "NetworkInterfacePipeline",
    "TimeZonePipeline",
    "adapter_label",
    "format_utc_offset",
    "time_zone_label",
]
