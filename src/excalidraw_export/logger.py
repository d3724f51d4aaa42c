"""Central logging configuration for the library."""
from __future__ import annotations

import logging
from typing import Optional

PACKAGE_LOGGER = "excalidraw_export"

_DEFAULT_LEVEL = logging.INFO
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger; handlers are left to the application."""
    return logging.getLogger(name)


def configure_logging() -> None:
    """Apply the default console configuration when the root logger has no handlers."""
    if not logging.getLogger().handlers:
        logging.basicConfig(level=_DEFAULT_LEVEL, format=_FORMAT)


def enable_debug() -> None:
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)
