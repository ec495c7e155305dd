from .codecs import HotkeyBundle
from .controller import SettingsController
from .errors import (
    ReadOnlyFieldError,
    SessionClosedError,
    SettingsLoadError,
    SettingsSyncError,
    SettingsWriteError,
    UnknownFieldError,
)
from .events import EventBus
from .log import configure_logging
from .options import Option, OptionList
from .state import ViewState
from .store import ConfigStore, FileConfigStore, MemoryConfigStore

configure_logging()


__all__ = [
    "ConfigStore",
    "EventBus",
    "FileConfigStore",
    "HotkeyBundle",
    "MemoryConfigStore",
    "Option",
    "OptionList",
    "ReadOnlyFieldError",
    "SessionClosedError",
    "SettingsController",
    "SettingsLoadError",
    "SettingsSyncError",
    "SettingsWriteError",
    "UnknownFieldError",
    "ViewState",
    "configure_logging",
]
