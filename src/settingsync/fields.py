"""Catalogue of the editable settings.

Each :class:`SettingSpec` names one slot of the view-state, the store key it
is persisted under and the codec translating between the two.  Derived and
availability slots carry no store key and cannot be assigned by users.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from . import codecs
from .codecs import EnumCodec, FieldCodec
from .errors import UnknownFieldError
from .host import HostPlatform

# Kinds accepted by :class:`SettingSpec`.
PRIMARY_KINDS = frozenset(
    {
        "toggle",
        "index",
        "integer",
        "scale",
        "percent",
        "text",
        "path_list",
        "hotkeys",
        "clock",
        "option",
        "zone",
    }
)
READ_ONLY_KINDS = frozenset({"derived", "host", "availability"})


@dataclass(frozen=True)
class SettingSpec:
    """Description of a single view-state slot."""

    name: str
    kind: str
    section: str
    domain_key: str | None = None
    codec: FieldCodec | None = None
    depends_on: tuple[str, ...] = ()
    compute: Callable[[Mapping[str, Any]], Any] | None = None
    host_rule: Callable[[HostPlatform], bool] | None = None
    options: str | None = None
    initial: Any = None
    label: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in PRIMARY_KINDS | READ_ONLY_KINDS:
            raise ValueError(f"unknown kind: {self.kind!r}")
        if self.kind == "derived" and (self.compute is None or not self.depends_on):
            raise ValueError(f"derived field {self.name!r} needs compute and depends_on")
        if self.kind in PRIMARY_KINDS and self.domain_key is None:
            raise ValueError(f"field {self.name!r} needs a domain key")

    @property
    def read_only(self) -> bool:
        return self.kind in READ_ONLY_KINDS


def _toggle(name: str, section: str, key: str, *, fallback: bool = False) -> SettingSpec:
    return SettingSpec(
        name, "toggle", section, f"{section}.{key}", codecs.ToggleCodec(fallback)
    )


def _enum(name: str, section: str, key: str, names: Iterable[str]) -> SettingSpec:
    return SettingSpec(name, "index", section, f"{section}.{key}", EnumCodec(tuple(names)))


SCALING_FILTER_FSR = codecs.SCALING_FILTERS.index("Fsr")

SETTINGS: tuple[SettingSpec, ...] = (
    # User interface
    _toggle("enable_discord_integration", "ui", "enable_discord_integration", fallback=True),
    _toggle("check_updates_on_start", "ui", "check_updates_on_start", fallback=True),
    _toggle("show_confirm_exit", "ui", "show_confirm_exit", fallback=True),
    _toggle("remember_window_state", "ui", "remember_window_state", fallback=True),
    _enum("hide_cursor", "ui", "hide_cursor", codecs.HIDE_CURSOR_MODES),
    SettingSpec("game_directories", "path_list", "ui", "ui.game_dirs", codecs.PathListCodec()),
    _enum("base_style", "ui", "base_style", codecs.BASE_STYLES),
    # Input
    _toggle("enable_docked_mode", "system", "enable_docked_mode", fallback=True),
    _toggle("enable_keyboard", "hid", "enable_keyboard"),
    _toggle("enable_mouse", "hid", "enable_mouse"),
    SettingSpec("keyboard_hotkeys", "hotkeys", "hid", "hid.hotkeys", codecs.HotkeyCodec()),
    # System
    _enum("region", "system", "region", codecs.REGIONS),
    _enum("language", "system", "language", codecs.LANGUAGES),
    SettingSpec(
        "time_zone",
        "zone",
        "system",
        "system.time_zone",
        codecs.IdentityCodec("UTC"),
        options="time_zones",
    ),
    SettingSpec("current_date", "clock", "system", "system.system_time_offset"),
    SettingSpec("current_time", "clock", "system", "system.system_time_offset"),
    _toggle("enable_vsync", "graphics", "enable_vsync", fallback=True),
    _toggle("enable_fs_integrity_checks", "system", "enable_fs_integrity_checks", fallback=True),
    _toggle("expand_dram_size", "system", "expand_ram"),
    _toggle("ignore_missing_services", "system", "ignore_missing_services"),
    # CPU
    _toggle("enable_pptc", "system", "enable_ptc", fallback=True),
    _enum("memory_mode", "system", "memory_manager_mode", codecs.MEMORY_MANAGER_MODES),
    _toggle("use_hypervisor", "system", "use_hypervisor", fallback=True),
    # Graphics
    _enum("graphics_backend", "graphics", "backend", codecs.GRAPHICS_BACKENDS),
    SettingSpec(
        "preferred_gpu",
        "option",
        "graphics",
        "graphics.preferred_gpu",
        options="gpus",
    ),
    _toggle("enable_shader_cache", "graphics", "enable_shader_cache", fallback=True),
    _toggle("enable_texture_recompression", "graphics", "enable_texture_recompression"),
    _toggle("enable_macro_hle", "graphics", "enable_macro_hle", fallback=True),
    _toggle(
        "enable_color_space_passthrough", "graphics", "enable_color_space_passthrough"
    ),
    SettingSpec(
        "resolution_scale",
        "index",
        "graphics",
        "graphics.res_scale",
        codecs.ResolutionScaleCodec(),
    ),
    SettingSpec(
        "custom_resolution_scale",
        "scale",
        "graphics",
        "graphics.res_scale_custom",
        codecs.ScaleCodec(minimum=0.1, maximum=10.0, fallback=1.0),
    ),
    SettingSpec(
        "max_anisotropy",
        "index",
        "graphics",
        "graphics.max_anisotropy",
        codecs.AnisotropyCodec(),
    ),
    _enum("aspect_ratio", "graphics", "aspect_ratio", codecs.ASPECT_RATIOS),
    _enum("backend_threading", "graphics", "backend_threading", codecs.BACKEND_THREADING),
    SettingSpec(
        "shader_dump_path",
        "text",
        "graphics",
        "graphics.shaders_dump_path",
        codecs.IdentityCodec(),
    ),
    _enum("anti_aliasing", "graphics", "anti_aliasing", codecs.ANTI_ALIASING),
    _enum("scaling_filter", "graphics", "scaling_filter", codecs.SCALING_FILTERS),
    SettingSpec(
        "scaling_filter_level",
        "integer",
        "graphics",
        "graphics.scaling_filter_level",
        codecs.IntegerCodec(minimum=0, maximum=100, fallback=80),
    ),
    # Audio
    _enum("audio_backend", "system", "audio_backend", codecs.AUDIO_BACKENDS),
    SettingSpec("volume", "percent", "system", "system.audio_volume", codecs.PercentCodec()),
    # Network
    _toggle("enable_internet_access", "system", "enable_internet_access"),
    SettingSpec(
        "network_interface",
        "option",
        "multiplayer",
        "multiplayer.lan_interface_id",
        options="network_interfaces",
    ),
    _enum("multiplayer_mode", "multiplayer", "mode", codecs.MULTIPLAYER_MODES),
    # Logging
    _toggle("enable_file_log", "logger", "enable_file_log", fallback=True),
    _toggle("enable_stub", "logger", "enable_stub", fallback=True),
    _toggle("enable_info", "logger", "enable_info", fallback=True),
    _toggle("enable_warn", "logger", "enable_warn", fallback=True),
    _toggle("enable_error", "logger", "enable_error", fallback=True),
    _toggle("enable_trace", "logger", "enable_trace"),
    _toggle("enable_guest", "logger", "enable_guest", fallback=True),
    _toggle("enable_debug", "logger", "enable_debug"),
    _toggle("enable_fs_access_log", "logger", "enable_fs_access_log"),
    SettingSpec(
        "fs_global_access_log_mode",
        "integer",
        "system",
        "system.fs_global_access_log_mode",
        codecs.IntegerCodec(minimum=0, maximum=3),
    ),
    _enum("graphics_debug_level", "logger", "graphics_debug_level", codecs.GRAPHICS_DEBUG_LEVELS),
    # Derived
    SettingSpec(
        "is_custom_resolution_scale_active",
        "derived",
        "graphics",
        depends_on=("resolution_scale",),
        compute=lambda v: v["resolution_scale"] == codecs.CUSTOM_SCALE_INDEX,
    ),
    SettingSpec(
        "is_scaling_filter_active",
        "derived",
        "graphics",
        depends_on=("scaling_filter",),
        compute=lambda v: v["scaling_filter"] == SCALING_FILTER_FSR,
    ),
    SettingSpec(
        "is_vulkan_selected",
        "derived",
        "graphics",
        depends_on=("graphics_backend",),
        compute=lambda v: v["graphics_backend"] == 0,
    ),
    SettingSpec(
        "scaling_filter_level_text",
        "derived",
        "graphics",
        depends_on=("scaling_filter_level",),
        compute=lambda v: str(v["scaling_filter_level"]),
    ),
    # Host platform
    SettingSpec("is_macos", "host", "system", host_rule=lambda h: h.is_macos),
    SettingSpec(
        "is_opengl_available", "host", "graphics", host_rule=lambda h: not h.is_macos
    ),
    SettingSpec(
        "is_hypervisor_available",
        "host",
        "system",
        host_rule=lambda h: h.is_macos and h.is_arm64,
    ),
    SettingSpec(
        "color_space_passthrough_available",
        "host",
        "graphics",
        host_rule=lambda h: h.is_macos,
    ),
    # Filled in by enrichment pipelines
    SettingSpec("is_vulkan_available", "availability", "graphics", initial=True),
    SettingSpec("is_openal_enabled", "availability", "system", initial=False),
    SettingSpec("is_soundio_enabled", "availability", "system", initial=False),
    SettingSpec("is_sdl2_enabled", "availability", "system", initial=False),
)

FIELDS: dict[str, SettingSpec] = {spec.name: spec for spec in SETTINGS}


def _build_dependents() -> dict[str, tuple[str, ...]]:
    out: dict[str, list[str]] = {}
    for spec in SETTINGS:
        for dep in spec.depends_on:
            out.setdefault(dep, []).append(spec.name)
    return {k: tuple(v) for k, v in out.items()}


DEPENDENTS: dict[str, tuple[str, ...]] = _build_dependents()


def get_spec(name: str) -> SettingSpec:
    try:
        return FIELDS[name]
    except KeyError as exc:
        raise UnknownFieldError(name) from exc


def primary_fields() -> list[SettingSpec]:
    """Return the user editable slots in catalogue order."""

    return [s for s in SETTINGS if not s.read_only]


def domain_keys() -> list[str]:
    seen: dict[str, None] = {}
    for spec in primary_fields():
        seen.setdefault(spec.domain_key, None)
    return list(seen)


__all__ = [
    "DEPENDENTS",
    "FIELDS",
    "PRIMARY_KINDS",
    "READ_ONLY_KINDS",
    "SETTINGS",
    "SettingSpec",
    "domain_keys",
    "get_spec",
    "primary_fields",
]
