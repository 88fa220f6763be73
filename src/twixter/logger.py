"""
Logging setup for twixter.

Diagnostics go to stderr through loguru so stdout carries only the timeline.
A rotating log file can be enabled through the ``logging`` settings.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

from twixter.config import LoggingConfig, get_config


def setup_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> None:
    """Install the console and file sinks.

    Args:
        level: Minimum level, overriding ``config.level``
        log_file: Log file path; turns on file logging when given
        config: Logging settings; the global configuration is used when omitted
    """
    config = config or get_config().logging
    level = level or config.level

    _logger.remove()

    if config.console_enabled:
        _logger.add(sys.stderr, format=config.format, level=level, colorize=True, diagnose=False)

    if log_file is None and not config.file_enabled:
        return

    log_path = Path(log_file or config.file_path).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    _logger.add(
        str(log_path),
        format=config.format,
        level=level,
        rotation=config.rotation,
        retention=config.retention,
        encoding="utf-8",
        enqueue=True,  # sinks are written from fetch worker threads
        diagnose=False,
    )


def get_logger(name: Optional[str] = None):
    """Return the shared logger, bound to ``name`` when one is given."""
    if name:
        return _logger.bind(name=name)
    return _logger


logger = _logger

__all__ = ["setup_logger", "get_logger", "logger"]
