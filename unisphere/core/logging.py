"""
Logging setup.

Every module logs through ``logging.getLogger(__name__)``; this installs one
stream handler on the package logger so uvicorn's own handlers stay untouched.
"""

import logging

from unisphere.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
HANDLER_NAME = "unisphere-console"


def configure_logging(settings: Settings) -> logging.Logger:
    """Configure the ``unisphere`` logger from settings (idempotent)."""
    logger = logging.getLogger("unisphere")
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logger.setLevel(level)

    # Other handlers (test capture, APM agents) may already be attached
    if not any(handler.get_name() == HANDLER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
