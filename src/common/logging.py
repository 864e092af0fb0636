import sys

from loguru import logger

from common.config import config


def setup_logging(level: str = config.log_level, fmt: str = config.log_format) -> None:
    """(Re)install the single stderr sink used by the whole service."""
    logger.remove()
    logger.add(sys.stderr, format=fmt, level=level.upper(), colorize=True, backtrace=False)


setup_logging()


def get_logger(name: str | None = None):
    return logger.bind(name=name) if name else logger
