"""
Application logger.
"""

import logging

from chatapp.core.config import get_settings

LOGGER_NAME = "chatapp"
_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def setup_logger(level: str | None = None) -> logging.Logger:
    """Configure and return the shared application logger."""
    app_logger = logging.getLogger(LOGGER_NAME)
    resolved = (level or get_settings().LOG_LEVEL or "INFO").upper()
    app_logger.setLevel(resolved)

    if not app_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        app_logger.addHandler(handler)

    return app_logger


logger = setup_logger()
