"""Logging setup for the htrackr command line."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Optional

from loguru import logger as global_loguru_logger
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from loguru import Logger


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING", description="Minimum level written to stderr")
    format: str = Field(
        default="<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        description="Format of a stderr log line",
    )
    file_format: str = Field(
        default="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
        description="Format of a log file line",
    )
    rotation: str = Field(default="1 MB", description="Rotate the log file by size")
    retention: str = Field(default="7 days", description="How long rotated files are kept")


def setup_logger(level: str = "WARNING", log_file: Optional[str] = None, config: Optional[LogConfig] = None) -> "Logger":
    """
    Configure the loguru logger for one command invocation and return it.

    All previously registered sinks are removed first, so calling this more
    than once (e.g. across tests) never duplicates output.

    Args:
        level: Minimum level for the stderr sink.
        log_file: Optional path of a file sink; the file always receives DEBUG and up.
        config: Formats and file rotation; defaults to LogConfig().
    """
    current = config or LogConfig()
    current = current.model_copy(update={"level": level.upper()})

    global_loguru_logger.remove()

    global_loguru_logger.add(
        sys.stderr,
        level=current.level,
        format=current.format,
        colorize=None,
    )

    if log_file:
        global_loguru_logger.add(
            log_file,
            level="DEBUG",
            format=current.file_format,
            rotation=current.rotation,
            retention=current.retention,
            encoding="utf-8",
        )

    global_loguru_logger.debug("logging configured at {}", current.level)
    return global_loguru_logger
