from __future__ import annotations

from copy import deepcopy
from typing import Any

# Built-in defaults grouped by section.  Keys are joined with ``.`` to form
# the setting names used by the configuration store.
BUILTIN_DEFAULTS: dict[str, dict[str, Any]] = {
    "ui": {
        "enable_discord_integration": True,
        "check_updates_on_start": True,
        "show_confirm_exit": True,
        "remember_window_state": True,
        "hide_cursor": "OnIdle",
        "game_dirs": [],
        "base_style": "Dark",
    },
    "hid": {
        "enable_keyboard": False,
        "enable_mouse": False,
        "hotkeys": {
            "toggle_vsync": "F1",
            "toggle_mute": "F2",
            "show_ui": "F4",
            "pause": "F5",
            "screenshot": "F8",
            "resolution_scale_up": "Unbound",
            "resolution_scale_down": "Unbound",
            "volume_up": "Unbound",
            "volume_down": "Unbound",
        },
    },
    "system": {
        "enable_docked_mode": True,
        "region": "USA",
        "language": "AmericanEnglish",
        "time_zone": "UTC",
        "system_time_offset": 0,
        "enable_fs_integrity_checks": True,
        "expand_ram": False,
        "ignore_missing_services": False,
        "enable_ptc": True,
        "memory_manager_mode": "HostMappedUnsafe",
        "use_hypervisor": True,
        "audio_backend": "SDL2",
        "audio_volume": 1.0,
        "enable_internet_access": False,
        "fs_global_access_log_mode": 0,
    },
    "graphics": {
        "backend": "Vulkan",
        "preferred_gpu": "",
        "enable_vsync": True,
        "enable_shader_cache": True,
        "enable_texture_recompression": False,
        "enable_macro_hle": True,
        "enable_color_space_passthrough": False,
        "res_scale": 1,
        "res_scale_custom": 1.0,
        "max_anisotropy": -1,
        "aspect_ratio": "Fixed16x9",
        "backend_threading": "Auto",
        "shaders_dump_path": "",
        "anti_aliasing": "None",
        "scaling_filter": "Bilinear",
        "scaling_filter_level": 80,
    },
    "logger": {
        "enable_file_log": True,
        "enable_stub": True,
        "enable_info": True,
        "enable_warn": True,
        "enable_error": True,
        "enable_trace": False,
        "enable_guest": True,
        "enable_debug": False,
        "enable_fs_access_log": False,
        "graphics_debug_level": "None",
    },
    "multiplayer": {
        "lan_interface_id": "0",
        "mode": "Disabled",
    },
}


def builtin_defaults() -> dict[str, Any]:
    """Return a fresh flat mapping of ``section.key`` to default value."""

    flat: dict[str, Any] = {}
    for section, mapping in BUILTIN_DEFAULTS.items():
        for key, value in mapping.items():
            flat[f"{section}.{key}"] = deepcopy(value)
    return flat


__all__ = ["BUILTIN_DEFAULTS", "builtin_defaults"]
