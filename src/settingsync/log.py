from __future__ import annotations

import logging
import os

DEBUG_ENV = "SETTINGSYNC_DEBUG"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stderr handler to the ``settingsync`` logger when asked to.

    Debug output is enabled by *verbose* or by setting ``SETTINGSYNC_DEBUG``.
    Nothing is attached twice.
    """

    logger = logging.getLogger("settingsync")
    if (verbose or os.environ.get(DEBUG_ENV)) and not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
    return logger


__all__ = ["DEBUG_ENV", "configure_logging"]
