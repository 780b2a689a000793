import sys
import logging
from typing import Optional, Union

from loguru import logger

from app.core.config import settings

CONSOLE_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

# Libraries that are chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx", "hpack", "watchfiles")


def _loguru_level(record: logging.LogRecord) -> Union[str, int]:
    try:
        return logger.level(record.levelname).name
    except ValueError:
        return record.levelno


class InterceptHandler(logging.Handler):
    """Forwards stdlib logging (uvicorn, supabase, ...) into loguru."""

    def emit(self, record: logging.LogRecord):
        # Walk out of the logging module so loguru reports the real call site
        frame, depth = sys._getframe(1), 1
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(_loguru_level(record), record.getMessage())


def setup_logging(level: Optional[str] = None, error_log: Optional[str] = None):
    """
    Console sink at `level` plus a rotating ERROR file at `error_log`.
    An empty `error_log` disables the file sink.
    """
    level = level or settings.LOG_LEVEL
    error_log = settings.LOG_FILE if error_log is None else error_log

    logger.remove()
    logger.add(sys.stdout, level=level, format=CONSOLE_FORMAT)
    if error_log:
        logger.add(
            error_log,
            level="ERROR",
            rotation="10 MB",
            retention="1 month",
            compression="zip",
            format=FILE_FORMAT,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

__all__ = ["logger", "setup_logging"]
