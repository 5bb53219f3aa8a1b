from __future__ import annotations

"""Logger access and one-shot handler setup for the graphcache package."""

import logging
from typing import Optional

from .config import CacheSettings

ROOT_LOGGER = "graphcache"

_handler: Optional[logging.Handler] = None


def getLogger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(settings: Optional[CacheSettings] = None) -> logging.Logger:
    """
    Install a single stream handler on the ``graphcache`` logger.

    Level and format come from ``settings.logging``; ``settings.debug``
    overrides the level with DEBUG. Calling this again replaces the handler
    installed by the previous call rather than stacking a second one.
    """
    global _handler

    settings = settings or CacheSettings()
    logger = logging.getLogger(ROOT_LOGGER)

    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(settings.logging.format))
    logger.addHandler(_handler)
    logger.setLevel("DEBUG" if settings.debug else settings.logging.level)
    return logger
