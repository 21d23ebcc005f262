"""
Logging setup for coderoom.

All modules log through loguru:

    from coderoom.logger import get_logger
    logger = get_logger(__name__)

Records emitted through the standard ``logging`` module (uvicorn, websockets)
are intercepted and forwarded to loguru so everything shares one sink.
"""

import logging
import sys
from typing import Optional

from loguru import logger as _logger

LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

_configured = False


class InterceptHandler(logging.Handler):
    """Route standard-library log records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        _logger.bind(name=record.name).opt(exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure loguru sinks.

    Args:
        level: Minimum level for the console sink.
        log_file: Optional file path; rotated at 10 MB.
    """
    global _configured

    _logger.remove()
    _logger.configure(extra={"name": "coderoom"})
    _logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)

    if log_file:
        _logger.add(
            log_file,
            level="DEBUG",
            format=LOG_FORMAT,
            rotation="10 MB",
            retention=3,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "websockets"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    _configured = True


def get_logger(name: str):
    """Return a loguru logger bound to the given module name."""
    if not _configured:
        _logger.configure(extra={"name": "coderoom"})
    return _logger.bind(name=name)
