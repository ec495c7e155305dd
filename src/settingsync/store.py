"""Domain configuration stores.

The synchronisation engine only depends on the :class:`ConfigStore`
protocol.  Two implementations are provided: :class:`FileConfigStore`,
which persists to an INI, YAML or JSON file chosen by suffix, and
:class:`MemoryConfigStore`, which keeps its "disk" copy in memory and is
handy for embedding and tests.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from copy import deepcopy
from pathlib import Path
from threading import RLock
from typing import Any, Protocol

from .defaults import builtin_defaults
from .errors import SettingsLoadError, SettingsWriteError

logger = logging.getLogger("settingsync.store")


class ConfigStore(Protocol):
    """Canonical persisted settings keyed by ``section.key`` names."""

    def get(self, key: str) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def persist(self) -> None:
        ...

    def reload_from_disk(self) -> None:
        ...

    def reset_to_defaults(self) -> None:
        ...


def _backend_for(path: Path):
    from .backends import get_backend_for_path

    return get_backend_for_path(path)


def coerce(raw: Any, default: Any) -> Any:
    """Return *raw* converted to the type of *default*.

    Text formats hand back strings for every value.  Values that cannot be
    converted are returned unchanged; the field codecs map them to their
    neutral defaults later.
    """

    if default is None or not isinstance(raw, str):
        return raw
    if isinstance(default, str):
        return raw
    if isinstance(default, bool):
        lower = raw.strip().lower()
        if lower in {"true", "1"}:
            return True
        if lower in {"false", "0"}:
            return False
        return raw
    for func in (int, float):
        if isinstance(default, func):
            try:
                return func(raw)
            except ValueError:
                try:
                    return func(float(raw))
                except ValueError:
                    return raw
    if isinstance(default, list | dict):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
    return raw


class _BaseStore:
    def __init__(self, defaults: Mapping[str, Any] | None = None) -> None:
        self._defaults: dict[str, Any] = (
            dict(defaults) if defaults is not None else builtin_defaults()
        )
        self._values: dict[str, Any] = {}
        self._lock = RLock()

    @property
    def defaults(self) -> Mapping[str, Any]:
        return self._defaults

    def get(self, key: str) -> Any:
        with self._lock:
            if key in self._values:
                return deepcopy(self._values[key])
            return deepcopy(self._defaults.get(key))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = deepcopy(value)

    def snapshot(self) -> dict[str, Any]:
        """Return every known setting with its current value."""
        with self._lock:
            merged = deepcopy(self._defaults)
            merged.update(deepcopy(self._values))
            return merged

    def reset_to_defaults(self) -> None:
        with self._lock:
            self._values = deepcopy(self._defaults)
        logger.debug("store reset to built-in defaults")


class MemoryConfigStore(_BaseStore):
    """Store whose persisted copy lives in memory."""

    def __init__(
        self,
        values: Mapping[str, Any] | None = None,
        *,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(defaults)
        self.persisted: dict[str, Any] = deepcopy(self._defaults)
        if values:
            self.persisted.update(deepcopy(dict(values)))
        self.persist_count = 0
        self.reload_count = 0
        self.reload_from_disk()

    def persist(self) -> None:
        with self._lock:
            self.persisted = self.snapshot()
            self.persist_count += 1

    def reload_from_disk(self) -> None:
        with self._lock:
            self._values = deepcopy(self.persisted)
            self.reload_count += 1


class FileConfigStore(_BaseStore):
    """Store persisted to a single settings file.

    Missing keys fall back to *defaults*; a missing file simply yields the
    defaults.
    """

    def __init__(
        self,
        path: Path | None = None,
        *,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(defaults)
        if path is None:
            from .paths import settings_file

            path = settings_file()
        self.path = Path(path)
        self.reload_from_disk()

    def reload_from_disk(self) -> None:
        backend = _backend_for(self.path)
        with self._lock:
            try:
                raw = backend.load(self.path)
            except OSError as exc:
                raise SettingsLoadError(f"{self.path}: {exc}") from exc
            values = deepcopy(self._defaults)
            for key, value in raw.items():
                values[key] = coerce(value, self._defaults.get(key))
            self._values = values
        logger.debug("loaded %d settings from %s", len(raw), self.path)

    def persist(self) -> None:
        backend = _backend_for(self.path)
        with self._lock:
            data = self.snapshot()
            try:
                backend.save(self.path, data)
            except OSError as exc:
                raise SettingsWriteError(f"{self.path}: {exc}") from exc
        logger.info("settings saved to %s", self.path)


__all__ = ["ConfigStore", "FileConfigStore", "MemoryConfigStore", "coerce"]
