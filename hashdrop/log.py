"""Logging configuration for hashdrop."""

import sys

from loguru import logger


FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a formatted stderr sink at
    `level`.
    """
    logger.remove()
    logger.add(sys.stderr, format=FORMAT, level=level.upper(),
               colorize=sys.stderr.isatty())
