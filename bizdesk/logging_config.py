"""
Logging setup for the API process.

Every module grabs its own logger with ``logging.getLogger(__name__)``; this
module only decides where records go and how they look. It is called once
from the application lifespan in main.py.
"""

import logging

from bizdesk.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Attach a single stream handler to the ``bizdesk`` logger.

    Safe to call more than once — an existing handler is reused, so test
    runs that build several apps don't end up printing each line twice.
    """
    logger = logging.getLogger("bizdesk")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
