class SettingsSyncError(Exception):
    """Base class for settingsync errors."""


class UnknownFieldError(SettingsSyncError):
    """Raised when a setting name is not part of the catalogue."""


class ReadOnlyFieldError(SettingsSyncError):
    """Raised when attempting to assign a derived or availability field."""


class SettingsLoadError(SettingsSyncError):
    """Raised when a backend fails to parse its file."""


class SettingsWriteError(SettingsSyncError):
    """Raised when the configuration file cannot be written."""


class SessionClosedError(SettingsSyncError):
    """Raised when a user edit targets a view-state that was discarded."""
