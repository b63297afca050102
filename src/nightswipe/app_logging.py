"""Logging configuration helpers."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Attach a single stream handler to the ``nightswipe`` logger.

    Repeated calls only adjust the level, so app factories may call it freely.
    """
    logger = logging.getLogger("nightswipe")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
