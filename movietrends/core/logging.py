"""Logging setup for movietrends."""

import logging

from movietrends.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings.

    ``debug=True`` forces DEBUG regardless of ``log_level``.
    """
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # niquests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
