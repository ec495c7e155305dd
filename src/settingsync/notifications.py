from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger("settingsync.notifications")

THREADING_WARNING = (
    "Graphics backend threading changes take effect after the application "
    "is restarted."
)


class NotificationSink(Protocol):
    def info(self, message: str) -> None:
        ...


class DriverActions(Protocol):
    """Host actions triggered when a commit changes driver related settings."""

    def toggle_threading(self, disabled: bool) -> None:
        ...


class LoggingNotificationSink:
    """Sink forwarding messages to the ``settingsync.notifications`` logger."""

    def info(self, message: str) -> None:
        logger.info("%s", message)


class NullDriverActions:
    def toggle_threading(self, disabled: bool) -> None:
        logger.debug("driver threading toggle requested, disabled=%s", disabled)


__all__ = [
    "THREADING_WARNING",
    "DriverActions",
    "LoggingNotificationSink",
    "NotificationSink",
    "NullDriverActions",
]
