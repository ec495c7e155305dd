"""Callback based notifications for the settings view-state.

Front-ends append callables to the lists exposed by :class:`EventBus`.
Callbacks run synchronously on the thread that emitted the event; for
enrichment results that is a worker thread, so view layers that are not
thread safe must marshal the call themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger("settingsync.events")

FieldCallback = Callable[[str, Any], None]


class EventBus:
    """Simple callback based pub/sub system."""

    def __init__(self) -> None:
        self.on_field_changed: list[FieldCallback] = []
        self.on_user_edit: list[FieldCallback] = []
        self.on_options_changed: list[Callable[[str], None]] = []
        self.on_phase_changed: list[Callable[[str], None]] = []
        self.on_saved: list[Callable[[], None]] = []
        self.on_close: list[Callable[[], None]] = []
        self.on_defaults_restored: list[Callable[[], None]] = []

    # Emit helpers -----------------------------------------------------
    def emit_field(self, name: str, value: Any) -> None:
        for cb in list(self.on_field_changed):
            cb(name, value)

    def emit_user_edit(self, name: str, value: Any) -> None:
        for cb in list(self.on_user_edit):
            cb(name, value)

    def emit_options(self, list_name: str) -> None:
        for cb in list(self.on_options_changed):
            cb(list_name)

    def emit_phase(self, phase: str) -> None:
        logger.debug("phase -> %s", phase)
        for cb in list(self.on_phase_changed):
            cb(phase)

    def emit_saved(self) -> None:
        for cb in list(self.on_saved):
            cb()

    def emit_close(self) -> None:
        for cb in list(self.on_close):
            cb()

    def emit_defaults_restored(self) -> None:
        for cb in list(self.on_defaults_restored):
            cb()


__all__ = ["EventBus", "FieldCallback"]
