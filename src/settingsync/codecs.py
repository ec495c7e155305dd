"""Bidirectional converters between domain values and view values.

A *domain value* is what the configuration store persists (enum names,
ratios, sentinels such as ``-1``).  A *view value* is what an editor binds
to (zero-based indices, percentages, display strings).  Every codec in
this module is stateless and total: unrecognised or out-of-range inputs
fall back to a neutral default instead of raising.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, fields, replace
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Protocol

# ---------------------------------------------------------------------------
# Enum tables
# ---------------------------------------------------------------------------

GRAPHICS_BACKENDS = ("Vulkan", "OpenGl")
BACKEND_THREADING = ("Auto", "Off", "On")
AUDIO_BACKENDS = ("Dummy", "OpenAl", "SoundIo", "SDL2")
ASPECT_RATIOS = (
    "Fixed4x3",
    "Fixed16x9",
    "Fixed16x10",
    "Fixed21x9",
    "Fixed32x9",
    "Stretched",
)
ANTI_ALIASING = ("None", "Fxaa", "SmaaLow", "SmaaMedium", "SmaaHigh", "SmaaUltra")
SCALING_FILTERS = ("Bilinear", "Nearest", "Fsr")
MEMORY_MANAGER_MODES = ("SoftwarePageTable", "HostMapped", "HostMappedUnsafe")
HIDE_CURSOR_MODES = ("Never", "OnIdle", "Always")
REGIONS = ("Japan", "USA", "Europe", "Australia", "China", "Korea", "Taiwan")
LANGUAGES = (
    "Japanese",
    "AmericanEnglish",
    "French",
    "German",
    "Italian",
    "Spanish",
    "Chinese",
    "Korean",
    "Dutch",
    "Portuguese",
    "Russian",
    "Taiwanese",
    "BritishEnglish",
    "CanadianFrench",
    "LatinAmericanSpanish",
    "SimplifiedChinese",
    "TraditionalChinese",
    "BrazilianPortuguese",
)
GRAPHICS_DEBUG_LEVELS = ("None", "Error", "Slowdowns", "All")
MULTIPLAYER_MODES = ("Disabled", "LdnMitm")
BASE_STYLES = ("Auto", "Light", "Dark")

# Resolution scale index reserved for the free-form multiplier.
CUSTOM_SCALE_INDEX = 4
CUSTOM_SCALE_SENTINEL = -1
AUTO_ANISOTROPY = -1


class FieldCodec(Protocol):
    """Converter between a domain value and its editable representation."""

    def to_view(self, value: Any) -> Any:
        """Return the view value for domain *value*."""

    def to_domain(self, value: Any) -> Any:
        """Return the domain value for view *value*."""


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value)) if "." in value else int(value)
        except ValueError:
            return None
    return None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        result = float(value)
        return result if math.isfinite(result) else None
    if isinstance(value, str):
        try:
            result = float(value)
        except ValueError:
            return None
        return result if math.isfinite(result) else None
    return None


def _clamp(value: float, minimum: float | None, maximum: float | None) -> float:
    if minimum is not None and value < minimum:
        return minimum
    if maximum is not None and value > maximum:
        return maximum
    return value


# ---------------------------------------------------------------------------
# Primitive codecs
# ---------------------------------------------------------------------------


class IdentityCodec:
    """Codec for free-form strings."""

    def __init__(self, fallback: str = "") -> None:
        self.fallback = fallback

    def to_view(self, value: Any) -> str:
        return value if isinstance(value, str) else self.fallback

    def to_domain(self, value: Any) -> str:
        return value if isinstance(value, str) else self.fallback


class ToggleCodec:
    """Codec for boolean toggles.

    Accepts the textual forms produced by INI backends (``true``/``false``,
    ``1``/``0``) in addition to real booleans.
    """

    def __init__(self, fallback: bool = False) -> None:
        self.fallback = fallback

    def _coerce(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in {0, 1}:
            return bool(value)
        if isinstance(value, str):
            lower = value.strip().lower()
            if lower in {"true", "1"}:
                return True
            if lower in {"false", "0"}:
                return False
        return self.fallback

    def to_view(self, value: Any) -> bool:
        return self._coerce(value)

    def to_domain(self, value: Any) -> bool:
        return self._coerce(value)


class IntegerCodec:
    """Codec for bounded integers; the same representation on both sides."""

    def __init__(
        self,
        minimum: int | None = None,
        maximum: int | None = None,
        fallback: int = 0,
    ) -> None:
        self.minimum = minimum
        self.maximum = maximum
        self.fallback = fallback

    def _coerce(self, value: Any) -> int:
        number = _as_int(value)
        if number is None:
            return self.fallback
        return int(_clamp(number, self.minimum, self.maximum))

    def to_view(self, value: Any) -> int:
        return self._coerce(value)

    def to_domain(self, value: Any) -> int:
        return self._coerce(value)


class ScaleCodec:
    """Codec for floats rounded to a fixed number of decimals on write."""

    def __init__(
        self,
        minimum: float | None = None,
        maximum: float | None = None,
        fallback: float = 1.0,
        decimals: int = 1,
    ) -> None:
        self.minimum = minimum
        self.maximum = maximum
        self.fallback = fallback
        self.decimals = decimals

    def to_view(self, value: Any) -> float:
        number = _as_float(value)
        if number is None:
            return self.fallback
        return round(_clamp(number, self.minimum, self.maximum), self.decimals)

    def to_domain(self, value: Any) -> float:
        return self.to_view(value)


class PercentCodec:
    """Domain ratio ``0..1`` to view percentage ``0..100``."""

    def __init__(self, fallback: float = 1.0) -> None:
        self.fallback = fallback

    def to_view(self, value: Any) -> float:
        ratio = _as_float(value)
        if ratio is None:
            ratio = self.fallback
        return round(_clamp(ratio, 0.0, 1.0) * 100, 1)

    def to_domain(self, value: Any) -> float:
        percent = _as_float(value)
        if percent is None:
            return self.fallback
        return _clamp(percent, 0.0, 100.0) / 100


class EnumCodec:
    """Static bidirectional table between enum names and indices.

    Decoding is deliberately lossy: a name that is not in the table loads
    as index ``0``.
    """

    def __init__(self, names: Sequence[str]) -> None:
        if not names:
            raise ValueError("enum table must not be empty")
        self.names: tuple[str, ...] = tuple(names)
        self._index = {name: i for i, name in enumerate(self.names)}

    def __len__(self) -> int:
        return len(self.names)

    def to_view(self, value: Any) -> int:
        if isinstance(value, str):
            return self._index.get(value, 0)
        return 0

    def to_domain(self, value: Any) -> str:
        index = _as_int(value)
        if index is None or not 0 <= index < len(self.names):
            return self.names[0]
        return self.names[index]


class ResolutionScaleCodec:
    """Resolution multiplier.

    View indices ``0..3`` select the 1x..4x multipliers; index ``4`` selects
    the custom scale, persisted as the ``-1`` sentinel.
    """

    def to_view(self, value: Any) -> int:
        scale = _as_int(value)
        if scale == CUSTOM_SCALE_SENTINEL:
            return CUSTOM_SCALE_INDEX
        if scale is None or not 1 <= scale <= CUSTOM_SCALE_INDEX:
            return 0
        return scale - 1

    def to_domain(self, value: Any) -> int:
        index = _as_int(value)
        if index == CUSTOM_SCALE_INDEX:
            return CUSTOM_SCALE_SENTINEL
        if index is None or not 0 <= index < CUSTOM_SCALE_INDEX:
            return 1
        return index + 1


class AnisotropyCodec:
    """Maximum anisotropy: ``-1`` (auto) is index 0, otherwise ``log2``."""

    def __init__(self, max_index: int = 4) -> None:
        self.max_index = max_index

    def to_view(self, value: Any) -> int:
        level = _as_float(value)
        if level is None or level == AUTO_ANISOTROPY or level <= 0:
            return 0
        exponent = math.log2(level)
        if not exponent.is_integer() or not 0 <= exponent <= self.max_index:
            return 0
        return int(exponent)

    def to_domain(self, value: Any) -> int:
        index = _as_int(value)
        if index is None or index == 0 or not 0 < index <= self.max_index:
            return AUTO_ANISOTROPY
        return 2**index


class PathListCodec:
    """Directory list; anything that is not a sequence of strings is empty."""

    def to_view(self, value: Any) -> list[str]:
        if isinstance(value, str) or not isinstance(value, Sequence):
            return []
        return [p for p in value if isinstance(p, str) and p]

    def to_domain(self, value: Any) -> list[str]:
        return self.to_view(value)


# ---------------------------------------------------------------------------
# Composite codecs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HotkeyBundle:
    """Keyboard shortcuts, one key name per action."""

    toggle_vsync: str = "F1"
    toggle_mute: str = "F2"
    show_ui: str = "F4"
    pause: str = "F5"
    screenshot: str = "F8"
    resolution_scale_up: str = "Unbound"
    resolution_scale_down: str = "Unbound"
    volume_up: str = "Unbound"
    volume_down: str = "Unbound"

    @classmethod
    def actions(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> HotkeyBundle:
        if not isinstance(data, Mapping):
            return cls()
        known = set(cls.actions())
        values = {
            k: v for k, v in data.items() if k in known and isinstance(v, str) and v
        }
        return cls(**values)

    def to_mapping(self) -> dict[str, str]:
        return asdict(self)

    def with_binding(self, action: str, key: str) -> HotkeyBundle:
        if action not in self.actions():
            raise KeyError(action)
        return replace(self, **{action: key})


class HotkeyCodec:
    def to_view(self, value: Any) -> HotkeyBundle:
        if isinstance(value, HotkeyBundle):
            return value
        return HotkeyBundle.from_mapping(value)

    def to_domain(self, value: Any) -> dict[str, str]:
        if isinstance(value, HotkeyBundle):
            return value.to_mapping()
        return HotkeyBundle.from_mapping(value).to_mapping()


class TimeOffsetCodec:
    """System clock offset in seconds to a ``(date, time)`` pair.

    The pair is the host clock shifted by the offset.  ``clock`` returns the
    current host time and is injectable for tests; sub-second precision is
    dropped on both sides.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self.clock = clock

    def _now(self) -> datetime:
        return self.clock().replace(microsecond=0)

    def to_view(self, value: Any) -> tuple[date, time]:
        offset = _as_int(value) or 0
        try:
            shifted = self._now() + timedelta(seconds=offset)
        except OverflowError:
            shifted = self._now()
        return shifted.date(), shifted.time().replace(microsecond=0)

    def to_domain(self, value: Any) -> int:
        try:
            day, moment = value
            target = datetime.combine(day, moment).replace(microsecond=0)
        except (TypeError, ValueError):
            return 0
        now = self._now()
        if target.tzinfo is not None and now.tzinfo is None:
            target = target.replace(tzinfo=None)
        return int((target - now).total_seconds())


__all__ = [
    "AUDIO_BACKENDS",
    "ANTI_ALIASING",
    "ASPECT_RATIOS",
    "AUTO_ANISOTROPY",
    "BACKEND_THREADING",
    "BASE_STYLES",
    "CUSTOM_SCALE_INDEX",
    "CUSTOM_SCALE_SENTINEL",
    "GRAPHICS_BACKENDS",
    "GRAPHICS_DEBUG_LEVELS",
    "HIDE_CURSOR_MODES",
    "LANGUAGES",
    "MEMORY_MANAGER_MODES",
    "MULTIPLAYER_MODES",
    "REGIONS",
    "SCALING_FILTERS",
    "AnisotropyCodec",
    "EnumCodec",
    "FieldCodec",
    "HotkeyBundle",
    "HotkeyCodec",
    "IdentityCodec",
    "IntegerCodec",
    "PathListCodec",
    "PercentCodec",
    "ResolutionScaleCodec",
    "ScaleCodec",
    "TimeOffsetCodec",
    "ToggleCodec",
]
