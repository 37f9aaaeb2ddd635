"""File logging helpers shared by every module logger."""

from logging import Logger
from logging.handlers import RotatingFileHandler

from pythonjsonlogger.json import JsonFormatter

from blog.configs.settings import settings

MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def file_logger(logger: Logger) -> Logger:
    """
    Attach a rotating JSON file handler to ``logger`` when file logging is on.

    Calling it repeatedly on the same logger is safe; the handler is only
    added once.

    Args:
        logger: Logger to decorate.

    Returns:
        The same logger, for chaining at module import time.
    """
    if not settings.LOG_TO_FILE:
        return logger

    log_file = settings.LOG_FILE
    if any(
        isinstance(h, RotatingFileHandler) and h.baseFilename == str(log_file.resolve())
        for h in logger.handlers
    ):
        return logger

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"),
    )
    logger.addHandler(handler)
    return logger
