"""Logging setup for processes embedding the kit."""

import logging
from typing import Optional

from orgkit.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once.

    Library modules only ever call ``logging.getLogger(__name__)``; this is
    for scripts and services that own the process.

    Args:
        level: Log level name, defaults to settings.LOG_LEVEL
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)

    # SQL echo is controlled by settings.DEBUG on the engine
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
