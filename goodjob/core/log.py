"""
Logging setup.

Every module logs through `logging.getLogger(__name__)`; this only installs
the root handler once, at the level from settings.
"""

import logging

from goodjob.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    settings = get_settings()
    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())

    if not any(getattr(h, "_goodjob", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._goodjob = True
        root.addHandler(handler)
