from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir as _uc

APP_NAME = "settingsync"
CONFIG_DIR_ENV = "SETTINGSYNC_CONFIG_DIR"
SETTINGS_FILENAME = "settings.ini"


def user_config_dir(app_name: str = APP_NAME) -> Path:
    """Return the per-user configuration directory.

    ``SETTINGSYNC_CONFIG_DIR`` overrides the platform location.
    """

    override = os.getenv(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser().resolve()
    return Path(_uc(appname=app_name)).resolve()


def settings_file(filename: str = SETTINGS_FILENAME) -> Path:
    return user_config_dir() / filename


__all__ = [
    "APP_NAME",
    "CONFIG_DIR_ENV",
    "SETTINGS_FILENAME",
    "settings_file",
    "user_config_dir",
]
