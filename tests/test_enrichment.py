from __future__ import annotations

import logging
import threading

from settingsync import MemoryConfigStore, ViewState
from settingsync.enrichment import (
    AudioBackendPipeline,
    GpuPipeline,
    NetworkInterfacePipeline,
    TimeZonePipeline,
    format_utc_offset,
)
from settingsync.host import HostPlatform
from utils import (
    GPUS,
    INTERFACES,
    ZONES,
    FailingHardware,
    FakeAudio,
    FakeHardware,
    FakeNetwork,
    FakeTimezones,
    fixed_clock,
)


def make_state(values=None) -> tuple[ViewState, MemoryConfigStore]:
    store = MemoryConfigStore(values)
    state = ViewState(host=HostPlatform(), clock=fixed_clock)
    state.load(store)
    return state, store


def test_gpu_labels_and_preferred_selection():
    state, store = make_state({"graphics.preferred_gpu": "0x8086_0x4680"})
    assert GpuPipeline(FakeHardware(GPUS)).run(state, store) is True
    assert state.labels("gpus") == ["NVIDIA GeForce RTX 3070 (dGPU)", "Intel UHD Graphics 770"]
    assert state.get("preferred_gpu") == 1
    assert state.get("is_vulkan_available") is True
    assert state.to_domain()["graphics.preferred_gpu"] == "0x8086_0x4680"


def test_unknown_preferred_gpu_selects_first_adapter():
    state, store = make_state({"graphics.preferred_gpu": "0xdead_0xbeef"})
    GpuPipeline(FakeHardware(GPUS)).run(state, store)
    assert state.get("preferred_gpu") == 0
    assert state.to_domain()["graphics.preferred_gpu"] == "0x10de_0x2484"


def test_no_adapters_falls_back_to_opengl():
    state, store = make_state()
    assert state.get("graphics_backend") == 0
    GpuPipeline(FakeHardware([])).run(state, store)
    assert state.get("is_vulkan_available") is False
    assert state.get("graphics_backend") == 1
    assert state.get("is_vulkan_selected") is False
    assert state.to_domain()["graphics.backend"] == "OpenGl"


def test_failing_enumerator_is_treated_as_empty(caplog):
    state, store = make_state()
    with caplog.at_level(logging.WARNING, logger="settingsync.enrichment"):
        assert GpuPipeline(FailingHardware()).run(state, store) is True
    assert "driver crashed" in caplog.text
    assert state.labels("gpus") == []
    assert state.get("is_vulkan_available") is False


def test_network_sentinel_comes_first():
    state, store = make_state({"multiplayer.lan_interface_id": "wlan0"})
    NetworkInterfacePipeline(FakeNetwork(INTERFACES)).run(state, store)
    assert state.labels("network_interfaces") == ["Default", "eth0", "wlan0"]
    assert state.get("network_interface") == 2


def test_network_unknown_interface_selects_default():
    state, store = make_state({"multiplayer.lan_interface_id": "ppp9"})
    NetworkInterfacePipeline(FakeNetwork(INTERFACES)).run(state, store)
    assert state.get("network_interface") == 0
    assert state.to_domain()["multiplayer.lan_interface_id"] == "0"


def test_time_zone_labels():
    state, store = make_state({"system.time_zone": "Asia/Kolkata"})
    TimeZonePipeline(FakeTimezones(ZONES)).run(state, store)
    assert state.labels("time_zones") == [
        "UTC-05:00 America/New_York EST",
        "UTC-03:00 America/Sao_Paulo",
        "UTC+00:00 UTC UTC",
        "UTC+01:00 Europe/Berlin CET",
        "UTC+05:30 Asia/Kolkata IST",
    ]
    assert state.get("time_zone") == "Asia/Kolkata"
    assert state.options("time_zones").selected_index == 4
    assert state.to_domain()["system.time_zone"] == "Asia/Kolkata"


def test_format_utc_offset_keeps_sign_below_one_hour():
    assert format_utc_offset(-1800) == "UTC-00:30"
    assert format_utc_offset(45 * 60 + 5 * 3600) == "UTC+05:45"


def test_time_zone_user_edit_survives_pipeline():
    state, store = make_state()
    state.set("time_zone", "Europe/Berlin")
    TimeZonePipeline(FakeTimezones(ZONES)).run(state, store)
    assert state.get("time_zone") == "Europe/Berlin"
    assert state.options("time_zones").selected_index == 3


def test_audio_flags():
    state, store = make_state()
    AudioBackendPipeline(FakeAudio({"OpenAl": True, "SoundIo": False})).run(state, store)
    assert state.get("is_openal_enabled") is True
    assert state.get("is_soundio_enabled") is False
    assert state.get("is_sdl2_enabled") is False


def test_pipeline_against_closed_state_is_noop():
    state, store = make_state()
    state.close()
    assert GpuPipeline(FakeHardware([])).run(state, store) is False
    assert state.get("is_vulkan_available") is True
    assert state.get("graphics_backend") == 0


def test_late_pipeline_does_not_touch_replaced_state(executor):
    state, store = make_state()
    gate = threading.Event()
    hardware = FakeHardware(GPUS, gate=gate)
    future = executor.submit(GpuPipeline(hardware).run, state, store)
    state.close()
    gate.set()
    assert future.result(timeout=5) is False
    assert state.labels("gpus") == []


def test_options_changed_events_are_emitted():
    state, store = make_state()
    seen: list[str] = []
    state.events.on_options_changed.append(seen.append)
    NetworkInterfacePipeline(FakeNetwork(INTERFACES)).run(state, store)
    assert seen == ["network_interfaces"] * 3
