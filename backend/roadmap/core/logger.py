"""
Logging setup for the application.

``logger`` is the shared application logger; ``setup_logger`` returns a
module-level child logger that writes through the same handler.
"""

import logging
import sys

from roadmap.core.config import get_settings

LOGGER_NAME = "roadmap"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _configure() -> logging.Logger:
    settings = get_settings()
    configured = logging.getLogger(LOGGER_NAME)
    if not configured.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        configured.addHandler(handler)
    configured.setLevel(settings.LOG_LEVEL.upper())
    return configured


logger = _configure()


def setup_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Names outside the ``roadmap`` namespace are nested under it so records
    still reach the shared handler.
    """
    if name != LOGGER_NAME and not name.startswith(f"{LOGGER_NAME}."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
