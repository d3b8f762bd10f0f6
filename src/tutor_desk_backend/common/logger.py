'''
Application logger shared by every module.
'''
import logging
import sys

from .config import settings

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "multipart", "passlib")


def setup_logger(name: str = 'tutordesk', level: str | None = None) -> logging.Logger:
    """
    Returns the named logger writing to stdout. The level comes from
    LOG_LEVEL unless given; an unknown level name falls back to INFO.
    """
    logger = logging.getLogger(name)
    resolved = logging.getLevelName((level or settings.LOG_LEVEL).upper())
    logger.setLevel(resolved if isinstance(resolved, int) else logging.INFO)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s.%(module)s:%(lineno)d | %(message)s'
        ))
        logger.addHandler(handler)
    logger.propagate = False

    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger

log = setup_logger()
