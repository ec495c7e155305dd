"""Transaction controller binding a :class:`ViewState` to a config store.

The controller owns the lifecycle of one settings editing session::

    clean --(user edit)--> editing --apply()--> applying --> clean

``open`` loads a fresh view-state and starts the enrichment pipelines in a
thread pool, in the same way the GUI core runs its service calls, so the
view is usable immediately.  ``apply`` and ``ok`` commit, ``cancel``
discards, ``restore_defaults`` reloads the view from the built-in
defaults without persisting them.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime
from typing import Any, Literal

from .enrichment import (
    AudioBackendPipeline,
    EnrichmentPipeline,
    GpuPipeline,
    NetworkInterfacePipeline,
    TimeZonePipeline,
)
from .enumerators import (
    AudioBackendProbe,
    HardwareEnumerator,
    LibraryAudioProbe,
    NetworkEnumerator,
    PsutilNetworkEnumerator,
    TimezoneSource,
    VulkanInfoEnumerator,
    ZoneInfoTimezoneSource,
)
from .errors import SessionClosedError
from .events import EventBus
from .fields import get_spec
from .host import HostPlatform
from .notifications import (
    THREADING_WARNING,
    DriverActions,
    LoggingNotificationSink,
    NotificationSink,
    NullDriverActions,
)
from .state import ViewState
from .store import ConfigStore

logger = logging.getLogger("settingsync.controller")

Phase = Literal["clean", "editing", "applying"]
CLEAN: Phase = "clean"
EDITING: Phase = "editing"
APPLYING: Phase = "applying"

THREADING_KEY = "graphics.backend_threading"
AUDIO_KEY = "system.audio_backend"
SIDE_EFFECT_KEYS = (THREADING_KEY, AUDIO_KEY)


class SettingsController:
    """Coordinate loading, enrichment and committing of settings."""

    def __init__(
        self,
        store: ConfigStore,
        *,
        hardware: HardwareEnumerator | None = None,
        network: NetworkEnumerator | None = None,
        timezones: TimezoneSource | None = None,
        audio: AudioBackendProbe | None = None,
        notifier: NotificationSink | None = None,
        driver: DriverActions | None = None,
        executor: ThreadPoolExecutor | None = None,
        host: HostPlatform | None = None,
        clock: Callable[[], datetime] = datetime.now,
        events: EventBus | None = None,
    ) -> None:
        self.store = store
        self.hardware = hardware or VulkanInfoEnumerator()
        self.network = network or PsutilNetworkEnumerator()
        self.timezones = timezones or ZoneInfoTimezoneSource()
        self.audio = audio or LibraryAudioProbe()
        self.notifier = notifier or LoggingNotificationSink()
        self.driver = driver or NullDriverActions()
        self.host = host or HostPlatform.detect()
        self.clock = clock
        self.events = events or EventBus()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="settingsync"
        )
        self._lock = threading.RLock()
        self._state: ViewState | None = None
        self._phase: Phase = CLEAN
        self._futures: list[Future[bool]] = []
        self._committed: dict[str, Any] = {}
        self._snapshot_committed()
        self.events.on_user_edit.append(self._on_user_edit)

    # --- properties --------------------------------------------------
    @property
    def state(self) -> ViewState:
        if self._state is None:
            raise SessionClosedError("no settings session has been opened")
        return self._state

    @property
    def phase(self) -> Phase:
        return self._phase

    def _set_phase(self, phase: Phase) -> None:
        if phase == self._phase:
            return
        self._phase = phase
        self.events.emit_phase(phase)

    def _open_state(self) -> ViewState:
        state = self.state
        if state.closed:
            raise SessionClosedError(f"session {state.session_id} is closed")
        return state

    # --- concurrency -------------------------------------------------
    def pipelines(self) -> Sequence[EnrichmentPipeline]:
        return (
            GpuPipeline(self.hardware),
            NetworkInterfacePipeline(self.network),
            TimeZonePipeline(self.timezones),
            AudioBackendPipeline(self.audio),
        )

    def run_async(self, pipeline: EnrichmentPipeline, state: ViewState) -> Future[bool]:
        """Run *pipeline* against *state* in the thread pool."""

        future = self._executor.submit(pipeline.run, state, self.store)
        future.add_done_callback(lambda f, name=pipeline.name: self._report(name, f))
        return future

    @staticmethod
    def _report(name: str, future: Future[Any]) -> None:
        if future.cancelled():
            logger.debug("pipeline %s cancelled", name)
            return
        exc = future.exception()
        if exc is not None:
            logger.error("pipeline %s failed", name, exc_info=exc)

    def wait_for_enrichment(self, timeout: float | None = None) -> bool:
        """Block until the pipelines of the current session are done."""

        done, pending = wait(list(self._futures), timeout=timeout)
        return not pending

    # --- commands ----------------------------------------------------
    def open(self, *, enrich: bool = True) -> ViewState:
        """Load a new view-state from the store and start enrichment.

        With ``enrich=False`` the option lists stay empty; callers may run
        individual pipelines themselves.
        """

        with self._lock:
            if self._state is not None and not self._state.closed:
                self._state.close()
            state = ViewState(events=self.events, host=self.host, clock=self.clock)
            state.load(self.store)
            self._state = state
            self._set_phase(CLEAN)
            self._futures = []
            if enrich:
                self._futures = [self.run_async(p, state) for p in self.pipelines()]
        logger.debug("opened session %s", state.session_id)
        return state

    def apply(self) -> None:
        """Write the view-state through to the store and persist it."""

        with self._lock:
            state = self._open_state()
            previous = self._phase
            self._set_phase(APPLYING)
            try:
                domain = state.to_domain()
                self._commit(domain)
            except Exception:
                self._set_phase(EDITING if previous == CLEAN else previous)
                raise
            state.mark_clean(domain)
            self._set_phase(CLEAN)
        self.events.emit_saved()

    def _snapshot_committed(self) -> None:
        self._committed = {key: self.store.get(key) for key in SIDE_EFFECT_KEYS}

    def _commit(self, domain: dict[str, Any]) -> None:
        changed = {
            key: domain[key]
            for key in SIDE_EFFECT_KEYS
            if domain.get(key) is not None and domain[key] != self._committed.get(key)
        }
        for key, value in domain.items():
            self.store.set(key, value)
        self.store.persist()
        self._committed.update(changed)

        if THREADING_KEY in changed:
            self.driver.toggle_threading(changed[THREADING_KEY] == "Off")
        if AUDIO_KEY in changed:
            message = f"AudioBackend toggled to: {changed[AUDIO_KEY]}"
            logger.info(message)
            self.notifier.info(message)

    def ok(self) -> None:
        """Apply and close the session."""

        self.apply()
        with self._lock:
            self.state.close()
        self.events.emit_close()

    def cancel(self) -> ViewState:
        """Discard edits, reverting the store to what is on disk.

        The current view-state is closed and replaced by a freshly loaded
        one, which is returned.  The replacement inherits the option lists
        and availability flags enriched so far; pipelines still running for
        the old session turn into no-ops.
        """

        with self._lock:
            self.store.reload_from_disk()
            self._snapshot_committed()
            previous = self._state
            if previous is not None:
                previous.close()
            state = ViewState(events=self.events, host=self.host, clock=self.clock)
            state.load(self.store)
            if previous is not None:
                state.adopt_enrichment(previous)
            self._state = state
            self._futures = []
            self._set_phase(CLEAN)
        self.events.emit_close()
        return state

    def restore_defaults(self) -> None:
        """Reset the store to defaults in memory and reload the view-state.

        Nothing is written to disk until the next :meth:`apply`.
        """

        with self._lock:
            state = self._open_state()
            self.store.reset_to_defaults()
            state.load(self.store)
            self._set_phase(EDITING)
        logger.info("settings restored to defaults")
        self.events.emit_defaults_restored()

    def shutdown(self, wait: bool = False) -> None:
        with self._lock:
            if self._state is not None:
                self._state.close()
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    # --- callbacks ---------------------------------------------------
    def _on_user_edit(self, name: str, value: Any) -> None:
        with self._lock:
            if self._phase == CLEAN:
                self._set_phase(EDITING)
            state = self._state
        if name != "backend_threading" or state is None:
            return
        spec = get_spec(name)
        if spec.codec.to_domain(value) != self._committed.get(spec.domain_key):
            self.notifier.info(THREADING_WARNING)


__all__ = ["APPLYING", "CLEAN", "EDITING", "Phase", "SettingsController"]
