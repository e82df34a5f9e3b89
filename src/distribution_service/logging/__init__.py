"""Logging configuration helpers."""

from __future__ import annotations

import logging
import sys

from loguru import logger

_LOGGING_CONFIGURED = False


def configure_logging(level: str = "INFO") -> None:
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno
            frame, depth = logging.currentframe(), 2
            while frame and frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1
            logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())

    # SQLAlchemy and friends log through the stdlib; route them into loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=logging.getLevelName(level))
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        backtrace=True,
        diagnose=False,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message} {extra}",
    )

    _LOGGING_CONFIGURED = True


__all__ = ["configure_logging", "logger"]
