"""
Logging setup: stdlib ``logging`` calls are intercepted and written by loguru.

Modules keep using ``logging.getLogger(__name__)``; only the sink changes.
"""

import json
import logging
import sys
from types import FrameType
from typing import Optional

from loguru import logger

from config import Settings


TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Redirect standard logging records to loguru."""

    def __init__(self, frame_depth: int = 6):
        super().__init__()
        self.frame_depth = frame_depth

    def emit(self, record: logging.LogRecord):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that issued the logging call
        frame: Optional[FrameType] = sys._getframe(self.frame_depth)
        depth = self.frame_depth
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def json_sink(message):
    record = message.record
    log_record = {
        "timestamp": record["time"].strftime("%Y-%m-%d %H:%M:%S"),
        "level": record["level"].name,
        "logger": record["name"],
        "message": record["message"],
    }
    if record["exception"]:
        log_record["exception"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else None,
            "value": str(record["exception"].value) if record["exception"].value else None,
        }
    sys.stderr.write(json.dumps(log_record) + "\n")


def setup_logging(settings: Settings):
    """Route stdlib logging through loguru at the configured level."""
    logger.remove()

    if settings.LOG_JSON:
        logger.add(json_sink, level=settings.LOG_LEVEL, backtrace=False, diagnose=False)
    else:
        logger.add(sys.stderr, level=settings.LOG_LEVEL, format=TEXT_FORMAT)

    logging.basicConfig(
        handlers=[InterceptHandler(settings.LOGGING_FRAME_DEPTH)], level=0, force=True
    )

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
