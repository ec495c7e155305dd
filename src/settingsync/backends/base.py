from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, MutableMapping
from pathlib import Path
from typing import IO, Any


def split_key(dotted: str) -> tuple[str, str]:
    """Split ``section.key`` into its section and the remaining key."""

    section, _, rest = dotted.partition(".")
    if not rest:
        return "__root__", section
    return section, rest


def nest(flat: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    out: dict[str, dict[str, Any]] = {}
    for dotted, value in flat.items():
        section, key = split_key(dotted)
        out.setdefault(section, {})[key] = value
    return out


def flatten(nested: Mapping[str, Any]) -> MutableMapping[str, Any]:
    out: MutableMapping[str, Any] = {}
    for section, mapping in nested.items():
        if not isinstance(mapping, Mapping):
            out[section] = mapping
            continue
        for key, value in mapping.items():
            out[key if section == "__root__" else f"{section}.{key}"] = value
    return out


def read_text(path: Path) -> str | None:
    """Return the file contents, or ``None`` for a missing or blank file."""

    path = Path(path)
    if not path.exists():
        return None
    raw = path.read_text(encoding="utf-8")
    return raw if raw.strip() else None


def atomic_write(path: Path, writer: Callable[[IO[str]], None]) -> None:
    """Call *writer* on a sibling ``.tmp`` file, then move it over *path*."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as fh:
        writer(fh)
    tmp.replace(path)


class BaseBackend(ABC):
    """Abstract base backend.

    Backends read and write a flat mapping of ``section.key`` names to
    values.  Text based formats may hand back strings; the store coerces
    them against the built-in defaults.
    """

    suffixes: tuple[str, ...] = ()

    @abstractmethod
    def load(self, path: Path) -> MutableMapping[str, Any]:
        pass

    @abstractmethod
    def save(self, path: Path, data: Mapping[str, Any]) -> None:
        pass
