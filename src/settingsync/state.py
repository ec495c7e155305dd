"""Editable snapshot of the settings.

:class:`ViewState` holds one view value per catalogue field together with
the option lists filled in by enrichment pipelines.  Users mutate it through
:meth:`ViewState.set` and :meth:`ViewState.set_directory`; pipelines go
through the ``session_id`` guarded methods so that a late pipeline can never
write into a view-state that has since been discarded.

All mutations happen under a single re-entrant lock.  Observers are called
after the lock is released, derived fields having already been recomputed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from datetime import date, datetime, time
from typing import Any, Literal
from uuid import uuid4

from .codecs import GRAPHICS_BACKENDS, TimeOffsetCodec
from .errors import ReadOnlyFieldError, SessionClosedError
from .events import EventBus, FieldCallback
from .fields import DEPENDENTS, FIELDS, SETTINGS, SettingSpec, get_spec, primary_fields
from .host import HostPlatform
from .options import OptionList
from .store import ConfigStore

logger = logging.getLogger("settingsync.state")

DIRECTORIES = "directories"
OPTION_LISTS = ("gpus", "network_interfaces", "time_zones")
# Option list name -> the field whose selection it backs.
OPTION_FIELDS: dict[str, str] = {s.options: s.name for s in SETTINGS if s.options}
OPENGL_INDEX = GRAPHICS_BACKENDS.index("OpenGl")

Change = tuple[str, Any]


class ViewState:
    """In-memory, user editable representation of the configuration."""

    def __init__(
        self,
        *,
        events: EventBus | None = None,
        host: HostPlatform | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.session_id = uuid4().hex
        self.events = events if events is not None else EventBus()
        self.host = host if host is not None else HostPlatform.detect()
        self.store: ConfigStore | None = None
        self._time_codec = TimeOffsetCodec(clock)
        self._lock = threading.RLock()
        self._closed = False
        self._generation = 0
        self._touched: set[str] = set()
        self._dirty: set[str] = set()
        self._persisted: dict[str, Any] = {}
        self._options = {name: OptionList() for name in OPTION_LISTS}
        self._values: dict[str, Any] = {spec.name: self._initial(spec) for spec in SETTINGS}
        self._recompute_all()

    def _initial(self, spec: SettingSpec) -> Any:
        if spec.kind == "host":
            return spec.host_rule(self.host)
        if spec.kind == "availability":
            return spec.initial
        if spec.kind == "derived":
            return None
        if spec.kind == "clock":
            day, moment = self._time_codec.to_view(0)
            return day if spec.name == "current_date" else moment
        if spec.kind == "option":
            return self._options[spec.options].selected_index
        return spec.codec.to_view(None)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def generation(self) -> int:
        """Number of completed :meth:`load` calls."""
        return self._generation

    def get(self, name: str) -> Any:
        get_spec(name)
        with self._lock:
            value = self._values[name]
            return list(value) if isinstance(value, list) else value

    def values(self) -> dict[str, Any]:
        with self._lock:
            return {
                k: list(v) if isinstance(v, list) else v for k, v in self._values.items()
            }

    def options(self, list_name: str) -> OptionList:
        return self._options[list_name]

    def labels(self, list_name: str) -> list[str]:
        with self._lock:
            return self._options[list_name].labels()

    def is_dirty(self, group: str = DIRECTORIES) -> bool:
        with self._lock:
            return group in self._dirty

    def is_touched(self, name: str) -> bool:
        with self._lock:
            return name in self._touched

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, callback: FieldCallback) -> FieldCallback:
        self.events.on_field_changed.append(callback)
        return callback

    def unsubscribe(self, callback: FieldCallback) -> None:
        try:
            self.events.on_field_changed.remove(callback)
        except ValueError:
            pass

    def _notify(self, changes: list[Change]) -> None:
        for name, value in changes:
            self.events.emit_field(name, value)

    # ------------------------------------------------------------------
    # Load / commit helpers
    # ------------------------------------------------------------------
    def load(self, store: ConfigStore) -> None:
        """Reset every editable field from *store* and clear the dirty marker.

        Option lists owned by enrichment pipelines keep their entries; only
        their selection is re-resolved against the stored keys.
        """

        changes: list[Change] = []
        with self._lock:
            self._require_open()
            self.store = store
            self._persisted = {}
            for spec in primary_fields():
                domain = store.get(spec.domain_key)
                self._persisted[spec.domain_key] = domain
                if spec.kind == "clock":
                    day, moment = self._time_codec.to_view(domain)
                    value = day if spec.name == "current_date" else moment
                elif spec.kind == "option":
                    options = self._options[spec.options]
                    options.select_key(None if domain is None else str(domain))
                    value = options.selected_index
                elif spec.kind == "zone":
                    value = spec.codec.to_view(domain)
                    self._options[spec.options].select_key(value)
                else:
                    value = spec.codec.to_view(domain)
                self._values[spec.name] = value
                changes.append((spec.name, value))
            self._touched.clear()
            self._dirty.clear()
            self._generation += 1
            changes.extend(self._require_available_backend())
            changes.extend(self._recompute_all())
        logger.debug("session %s loaded (generation %d)", self.session_id, self._generation)
        self._notify(changes)

    def to_domain(self) -> dict[str, Any]:
        """Return the domain values to commit, keyed by store key.

        The directory list is only included when it was modified, and the
        time zone only when it names a known region.
        """

        out: dict[str, Any] = {}
        with self._lock:
            for spec in primary_fields():
                key = spec.domain_key
                value = self._values[spec.name]
                if spec.kind == "clock":
                    if key in out:
                        continue
                    if self._touched & {"current_date", "current_time"}:
                        pair = (self._values["current_date"], self._values["current_time"])
                        out[key] = self._time_codec.to_domain(pair)
                    else:
                        # Untouched clock fields keep the stored offset.
                        previous = self._persisted.get(key)
                        valid = isinstance(previous, int) and not isinstance(previous, bool)
                        out[key] = previous if valid else 0
                elif spec.kind == "option":
                    options = self._options[spec.options]
                    if len(options):
                        out[key] = options.key_at(options.selected_index)
                    else:
                        out[key] = options.selected_key or ""
                elif spec.kind == "zone":
                    if value in self._options[spec.options]:
                        out[key] = value
                elif spec.kind == "path_list":
                    if DIRECTORIES in self._dirty:
                        out[key] = list(value)
                else:
                    out[key] = spec.codec.to_domain(value)
        return out

    def mark_clean(self, domain: Mapping[str, Any] | None = None) -> None:
        """Reset the dirty marker after a commit, recording *domain* as persisted."""
        with self._lock:
            self._dirty.clear()
            if domain:
                self._persisted.update(domain)

    def adopt_enrichment(self, previous: ViewState) -> None:
        """Copy option entries and availability flags from *previous*.

        Selections are re-resolved against the keys this view-state loaded,
        so the copied lists behave as if the pipelines had run again.
        """

        with previous._lock:
            entries = {
                name: [(o.label, o.key) for o in options]
                for name, options in previous._options.items()
            }
            flags = {
                spec.name: previous._values[spec.name]
                for spec in SETTINGS
                if spec.kind == "availability"
            }
        changes: list[Change] = []
        with self._lock:
            self._require_open()
            for name, items in entries.items():
                self._options[name].clear()
                self._options[name].extend(items)
                changes.extend(self._sync_option(name))
            for name, value in flags.items():
                self._values[name] = value
                changes.append((name, value))
            changes.extend(self._require_available_backend())
            changes.extend(self._recompute_all())
        for name in entries:
            self.events.emit_options(name)
        self._notify(changes)

    def close(self) -> None:
        with self._lock:
            self._closed = True
        logger.debug("session %s closed", self.session_id)

    def _require_open(self) -> None:
        if self._closed:
            raise SessionClosedError(f"session {self.session_id} is closed")

    # ------------------------------------------------------------------
    # User edits
    # ------------------------------------------------------------------
    def set(self, name: str, value: Any) -> Any:
        """Assign *value* to the editable field *name* and return the stored value."""

        spec = get_spec(name)
        if spec.read_only:
            raise ReadOnlyFieldError(name)
        changes: list[Change] = []
        with self._lock:
            self._require_open()
            stored = self._normalize(spec, value)
            if spec.kind == "option":
                stored = self._options[spec.options].select(stored)
            elif spec.kind == "zone":
                self._options[spec.options].select_key(stored)
            elif spec.kind == "path_list":
                self._dirty.add(DIRECTORIES)
            self._values[name] = stored
            self._touched.add(name)
            changes.append((name, stored))
            changes.extend(self._recompute(name))
        self._notify(changes)
        self.events.emit_user_edit(name, stored)
        return stored

    def _normalize(self, spec: SettingSpec, value: Any) -> Any:
        codec = spec.codec
        if spec.kind in {"index", "percent"}:
            return codec.to_view(codec.to_domain(value))
        if spec.kind == "clock":
            if spec.name == "current_date":
                if isinstance(value, datetime):
                    return value.date()
                if isinstance(value, date):
                    return value
                raise TypeError("expected date")
            if isinstance(value, time):
                return value.replace(microsecond=0)
            raise TypeError("expected time")
        if spec.kind == "option":
            return value if isinstance(value, int) and not isinstance(value, bool) else 0
        if spec.kind == "zone":
            if not isinstance(value, str):
                raise TypeError("expected str")
            return value
        return codec.to_view(value)

    def set_directory(self, path: str, action: Literal["add", "remove"]) -> list[str]:
        """Add or remove a game directory and mark the list dirty.

        The dirty marker is set on every call, even when the list ends up
        unchanged.
        """

        if action not in {"add", "remove"}:
            raise ValueError(f"unknown directory action: {action!r}")
        with self._lock:
            self._require_open()
            dirs = list(self._values["game_directories"])
            if action == "add" and path not in dirs:
                dirs.append(path)
            elif action == "remove" and path in dirs:
                dirs.remove(path)
            self._values["game_directories"] = dirs
            self._dirty.add(DIRECTORIES)
            self._touched.add("game_directories")
        self._notify([("game_directories", list(dirs))])
        self.events.emit_user_edit("game_directories", list(dirs))
        return list(dirs)

    def validate_and_set_time_zone(self, location: str) -> bool:
        """Select *location* if the time zone table knows it."""

        with self._lock:
            known = location in self._options["time_zones"]
        if known:
            self.set("time_zone", location)
        return known

    # ------------------------------------------------------------------
    # Enrichment entry points
    # ------------------------------------------------------------------
    def _live(self, session_id: str) -> bool:
        return not self._closed and session_id == self.session_id

    def reset_options(
        self,
        session_id: str,
        list_name: str,
        sentinel: tuple[str, str] | None = None,
    ) -> bool:
        """Empty *list_name*, inserting *sentinel* at index 0 when given."""

        with self._lock:
            if not self._live(session_id):
                return False
            options = self._options[list_name]
            options.clear()
            if sentinel is not None:
                options.append(*sentinel)
            changes = self._sync_option(list_name)
        self.events.emit_options(list_name)
        self._notify(changes)
        return True

    def append_option(self, session_id: str, list_name: str, label: str, key: str) -> bool:
        with self._lock:
            if not self._live(session_id):
                return False
            self._options[list_name].append(label, key)
            changes = self._sync_option(list_name)
        self.events.emit_options(list_name)
        self._notify(changes)
        return True

    def resolve_selection(
        self,
        session_id: str,
        list_name: str,
        key: str | None,
        generation: int,
    ) -> bool:
        """Point the selection of *list_name* at *key* once enumeration is done.

        Skipped when the user already edited the backing field, or when the
        view-state was reloaded after the pipeline captured *key*.
        """

        field = OPTION_FIELDS[list_name]
        with self._lock:
            if not self._live(session_id):
                return False
            if field in self._touched or generation != self._generation:
                logger.debug("keeping user selection for %s", field)
                return False
            options = self._options[list_name]
            options.select_key(key)
            if FIELDS[field].kind == "option":
                self._values[field] = options.selected_index
            changes: list[Change] = [(field, self._values[field])]
            changes.extend(self._recompute(field))
        self._notify(changes)
        return True

    def set_availability(self, session_id: str, name: str, value: bool) -> bool:
        if get_spec(name).kind != "availability":
            raise ReadOnlyFieldError(name)
        with self._lock:
            if not self._live(session_id):
                return False
            self._values[name] = bool(value)
        self._notify([(name, bool(value))])
        return True

    def apply_fallback(self, session_id: str, name: str, value: Any) -> bool:
        """Force an editable field to a safe value after a capability check."""

        spec = get_spec(name)
        if spec.read_only:
            raise ReadOnlyFieldError(name)
        with self._lock:
            if not self._live(session_id):
                return False
            stored = self._normalize(spec, value)
            self._values[name] = stored
            changes: list[Change] = [(name, stored)]
            changes.extend(self._recompute(name))
        self._notify(changes)
        return True

    # ------------------------------------------------------------------
    # Derived fields
    # ------------------------------------------------------------------
    def _sync_option(self, list_name: str) -> list[Change]:
        field = OPTION_FIELDS.get(list_name)
        if field is None or FIELDS[field].kind != "option":
            return []
        index = self._options[list_name].selected_index
        if self._values[field] == index:
            return []
        self._values[field] = index
        return [(field, index)]

    def _recompute(self, name: str) -> list[Change]:
        changes: list[Change] = []
        for dep in DEPENDENTS.get(name, ()):
            value = FIELDS[dep].compute(self._values)
            self._values[dep] = value
            changes.append((dep, value))
        return changes

    def _require_available_backend(self) -> list[Change]:
        # Vulkan stays unselectable while no adapter was found.
        if self._values["is_vulkan_available"] or self._values["graphics_backend"] == OPENGL_INDEX:
            return []
        self._values["graphics_backend"] = OPENGL_INDEX
        return [("graphics_backend", OPENGL_INDEX)]

    def _recompute_all(self) -> list[Change]:
        changes: list[Change] = []
        for spec in SETTINGS:
            if spec.kind == "derived":
                value = spec.compute(self._values)
                self._values[spec.name] = value
                changes.append((spec.name, value))
        return changes


__all__ = ["DIRECTORIES", "OPENGL_INDEX", "OPTION_FIELDS", "OPTION_LISTS", "ViewState"]
