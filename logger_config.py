"""Logging setup for Health Reminders.

Each component (database, store, notifier, channels, service) writes to its
own rotating file under LOG_DIR. Level, console echo and rotation size come
from settings.
"""

import logging
from logging.handlers import RotatingFileHandler
import os

from config import settings

LOG_DIR = settings.LOG_DIR or os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs')
os.makedirs(LOG_DIR, exist_ok=True)

LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, log_file: str = 'health.log') -> logging.Logger:
    """Return the component logger, attaching its handlers on first use.

    Args:
        name: Logger name (usually __name__)
        log_file: File under LOG_DIR, e.g. 'store.log'
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = RotatingFileHandler(
        os.path.join(LOG_DIR, log_file),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if settings.LOG_TO_CONSOLE:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def quiet_library_loggers(level: int = logging.WARNING) -> None:
    """Keep SQL, scheduler and HTTP client chatter out of component logs."""
    for name in ('sqlalchemy', 'apscheduler', 'httpx'):
        logging.getLogger(name).setLevel(level)


quiet_library_loggers()
