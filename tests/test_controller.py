from __future__ import annotations

import threading

import pytest

from settingsync import MemoryConfigStore, SessionClosedError, SettingsController, SettingsWriteError
from settingsync.controller import APPLYING, CLEAN, EDITING
from settingsync.defaults import builtin_defaults
from settingsync.host import HostPlatform
from settingsync.notifications import THREADING_WARNING
from utils import INTERFACES, FakeAudio, FakeHardware, FakeNetwork, FakeTimezones


class BrokenStore(MemoryConfigStore):
    def persist(self) -> None:
        raise SettingsWriteError("disk full")


def test_state_requires_open(make_controller):
    controller = make_controller()
    with pytest.raises(SessionClosedError):
        controller.state


def test_open_populates_options(make_controller):
    controller = make_controller(MemoryConfigStore({"multiplayer.lan_interface_id": "eth0"}))
    state = controller.open()
    assert controller.wait_for_enrichment(timeout=5)
    assert controller.phase == CLEAN
    assert state.labels("network_interfaces") == ["Default", "eth0", "wlan0"]
    assert state.get("network_interface") == 1
    assert len(state.labels("gpus")) == 2
    assert state.get("is_openal_enabled") is True
    assert state.get("is_soundio_enabled") is False


def test_edit_and_apply_cycle(make_controller):
    store = MemoryConfigStore()
    controller = make_controller(store)
    phases: list[str] = []
    saved: list[bool] = []
    controller.events.on_phase_changed.append(phases.append)
    controller.events.on_saved.append(lambda: saved.append(True))
    state = controller.open()
    controller.wait_for_enrichment(timeout=5)

    state.set("enable_vsync", False)
    assert controller.phase == EDITING
    controller.apply()

    assert phases == [EDITING, APPLYING, CLEAN]
    assert saved == [True]
    assert store.persist_count == 1
    assert store.persisted["graphics.enable_vsync"] is False
    assert store.persisted["graphics.preferred_gpu"] == "0x10de_0x2484"


def test_cancel_leaves_persisted_values_untouched(make_controller):
    store = MemoryConfigStore({"graphics.enable_vsync": True})
    controller = make_controller(store)
    closed: list[bool] = []
    controller.events.on_close.append(lambda: closed.append(True))
    old = controller.open()
    before = dict(store.persisted)

    old.set("enable_vsync", False)
    old.set_directory("/games", "add")
    fresh = controller.cancel()

    assert store.persisted == before
    assert store.persist_count == 0
    assert store.get("graphics.enable_vsync") is True
    assert old.closed
    assert fresh is controller.state
    assert fresh.get("enable_vsync") is True
    assert fresh.get("game_directories") == []
    assert controller.phase == CLEAN
    assert closed == [True]


def test_audio_change_notifies_once(make_controller, caplog):
    store = MemoryConfigStore({"system.audio_backend": "SDL2"})
    controller = make_controller(store)
    state = controller.open()
    state.set("audio_backend", 1)
    with caplog.at_level("INFO", logger="settingsync.controller"):
        controller.apply()
        controller.apply()
    assert controller.notifier.messages == ["AudioBackend toggled to: OpenAl"]
    assert caplog.text.count("AudioBackend toggled to: OpenAl") == 1
    assert store.persisted["system.audio_backend"] == "OpenAl"


def test_threading_change_warns_and_toggles_driver_once(make_controller):
    controller = make_controller()
    state = controller.open()
    state.set("backend_threading", 1)
    assert controller.notifier.messages == [THREADING_WARNING]

    controller.apply()
    controller.apply()
    assert controller.driver.calls == [True]
    assert controller.store.persisted["graphics.backend_threading"] == "Off"


def test_threading_back_to_persisted_value_does_not_warn(make_controller):
    controller = make_controller()
    state = controller.open()
    state.set("backend_threading", 0)
    assert controller.notifier.messages == []
    controller.apply()
    assert controller.driver.calls == []


def test_restore_defaults_reproduces_defaults(make_controller):
    store = MemoryConfigStore(
        {
            "graphics.res_scale": 3,
            "ui.base_style": "Light",
            "system.audio_volume": 0.2,
            "ui.game_dirs": ["/games"],
        }
    )
    controller = make_controller(store)
    restored: list[bool] = []
    controller.events.on_defaults_restored.append(lambda: restored.append(True))
    state = controller.open(enrich=False)

    controller.restore_defaults()
    assert restored == [True]
    assert controller.phase == EDITING
    assert state.get("resolution_scale") == 0
    assert state.get("base_style") == 2
    assert state.get("volume") == 100.0
    assert state.get("game_directories") == []
    assert store.persisted["ui.base_style"] == "Light"

    controller.apply()
    assert store.persisted == builtin_defaults()


def test_failed_apply_returns_to_editing(make_controller):
    controller = make_controller(BrokenStore())
    state = controller.open(enrich=False)
    state.set_directory("/games", "add")
    with pytest.raises(SettingsWriteError):
        controller.apply()
    assert controller.phase == EDITING
    assert state.is_dirty()


def test_ok_applies_and_closes(make_controller):
    store = MemoryConfigStore()
    controller = make_controller(store)
    closed: list[bool] = []
    controller.events.on_close.append(lambda: closed.append(True))
    state = controller.open(enrich=False)
    state.set("enable_mouse", True)
    controller.ok()
    assert store.persisted["hid.enable_mouse"] is True
    assert state.closed
    assert closed == [True]
    with pytest.raises(SessionClosedError):
        controller.apply()


def test_no_adapters_commits_opengl(make_controller):
    controller = make_controller(hardware=FakeHardware([]))
    state = controller.open()
    assert controller.wait_for_enrichment(timeout=5)
    assert state.get("is_vulkan_available") is False
    controller.apply()
    assert controller.store.persisted["graphics.backend"] == "OpenGl"


def test_reopen_discards_previous_session(make_controller):
    controller = make_controller()
    first = controller.open()
    second = controller.open()
    assert first.closed
    assert not second.closed
    assert first.session_id != second.session_id


def test_restore_defaults_beats_inflight_pipeline(make_controller):
    gate = threading.Event()
    store = MemoryConfigStore({"multiplayer.lan_interface_id": "wlan0"})
    controller = make_controller(store, network=FakeNetwork(INTERFACES, gate=gate))
    state = controller.open()
    controller.restore_defaults()
    gate.set()
    assert controller.wait_for_enrichment(timeout=5)
    assert state.get("network_interface") == 0
    controller.apply()
    assert store.persisted["multiplayer.lan_interface_id"] == "0"


def test_shutdown_closes_session_and_owned_pool():
    controller = SettingsController(
        MemoryConfigStore(),
        hardware=FakeHardware([]),
        network=FakeNetwork(INTERFACES),
        timezones=FakeTimezones([]),
        audio=FakeAudio(),
        host=HostPlatform(),
    )
    state = controller.open()
    assert controller.wait_for_enrichment(timeout=5)
    controller.shutdown(wait=True)
    assert state.closed
    with pytest.raises(RuntimeError):
        controller.open()


class FlakyStore(MemoryConfigStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail = True

    def persist(self) -> None:
        if self.fail:
            raise SettingsWriteError("disk full")
        super().persist()


def test_restore_defaults_keeps_opengl_without_adapters(make_controller):
    controller = make_controller(hardware=FakeHardware([]))
    state = controller.open()
    assert controller.wait_for_enrichment(timeout=5)

    controller.restore_defaults()
    assert state.get("is_vulkan_available") is False
    assert state.get("graphics_backend") == 1
    assert state.get("is_vulkan_selected") is False
    controller.apply()
    assert controller.store.persisted["graphics.backend"] == "OpenGl"


def test_restore_defaults_then_apply_fires_side_effects(make_controller):
    store = MemoryConfigStore(
        {"graphics.backend_threading": "Off", "system.audio_backend": "OpenAl"}
    )
    controller = make_controller(store)
    controller.open(enrich=False)

    controller.restore_defaults()
    controller.apply()
    assert store.persisted["graphics.backend_threading"] == "Auto"
    assert controller.driver.calls == [False]
    assert controller.notifier.messages == ["AudioBackend toggled to: SDL2"]


def test_threading_warning_compares_against_saved_value_after_defaults(make_controller):
    store = MemoryConfigStore({"graphics.backend_threading": "Off"})
    controller = make_controller(store)
    state = controller.open(enrich=False)
    controller.restore_defaults()

    state.set("backend_threading", 1)
    assert controller.notifier.messages == []
    controller.apply()
    assert controller.driver.calls == []


def test_side_effects_wait_for_successful_persist(make_controller):
    store = FlakyStore({"system.audio_backend": "SDL2"})
    controller = make_controller(store)
    state = controller.open(enrich=False)
    state.set("backend_threading", 1)
    state.set("audio_backend", 1)
    assert controller.notifier.messages == [THREADING_WARNING]

    with pytest.raises(SettingsWriteError):
        controller.apply()
    assert controller.driver.calls == []
    assert controller.notifier.messages == [THREADING_WARNING]

    store.fail = False
    controller.apply()
    assert controller.driver.calls == [True]
    assert controller.notifier.messages == [THREADING_WARNING, "AudioBackend toggled to: OpenAl"]
    assert store.persisted["system.audio_backend"] == "OpenAl"


def test_cancel_carries_enrichment_over(make_controller):
    store = MemoryConfigStore({"multiplayer.lan_interface_id": "wlan0"})
    controller = make_controller(store, hardware=FakeHardware([]))
    old = controller.open()
    assert controller.wait_for_enrichment(timeout=5)
    old.set("network_interface", 1)

    fresh = controller.cancel()
    assert fresh.labels("network_interfaces") == ["Default", "eth0", "wlan0"]
    assert fresh.get("network_interface") == 2
    assert fresh.get("is_vulkan_available") is False
    assert fresh.get("graphics_backend") == 1
    assert fresh.get("is_openal_enabled") is True
    assert fresh.get("is_soundio_enabled") is False
    assert old.labels("network_interfaces") == fresh.labels("network_interfaces")
