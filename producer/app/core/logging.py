"""Loguru sink setup for the producer process."""
from __future__ import annotations

import sys

from loguru import logger

_TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "{extra[service_name]} | {extra[event]} | {message} {extra}"
)


def configure_logging(level: str = "INFO", *, json: bool = False) -> None:
    """
    Replace loguru's default sink with a single stderr sink.

    json=True serializes every record, bound fields included, so aggregators can
    filter on ``event`` / ``service_name``.
    """
    logger.remove()
    logger.configure(extra={"service_name": "-", "event": "-"})
    if json:
        logger.add(sys.stderr, level=level.upper(), serialize=True)
    else:
        logger.add(sys.stderr, level=level.upper(), format=_TEXT_FORMAT)
