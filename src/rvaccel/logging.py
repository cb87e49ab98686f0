"""
Logging Setup

Library modules log through ``logging.getLogger(__name__)`` and never attach
handlers themselves. Tools call configure_logging() once to route the
``rvaccel`` logger hierarchy to the console and, optionally, a file.

Usage:
    from rvaccel.logging import LogConfig, configure_logging, get_logger

    configure_logging(LogConfig(console_level=logging.DEBUG))
    log = get_logger("simulate")
    log.info("Starting run...")
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


ROOT_LOGGER_NAME = "rvaccel"

CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
CONSOLE_FORMAT_TIMESTAMPED = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"

# Marks handlers installed here so reconfiguring replaces them
_HANDLER_ATTR = "_rvaccel_handler"


@dataclass
class LogConfig:
    """Configuration for simulator logging."""

    # Log level for console output
    console_level: int = logging.WARNING

    # Log level for file output
    file_level: int = logging.DEBUG

    # Log file path; None for console only
    log_file: Optional[Path] = None

    # Whether to include timestamps in console output
    console_timestamps: bool = False


def parse_level(level: Union[int, str]) -> int:
    """'debug' / 'INFO' / 10 -> logging level number. Raises ValueError."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level {level!r}")
    return value


def configure_logging(config: Optional[LogConfig] = None) -> logging.Logger:
    """
    Attach console (stderr) and optional file handlers to the ``rvaccel`` logger.

    Calling again replaces the handlers installed by a previous call.
    """
    config = config or LogConfig()
    root = logging.getLogger(ROOT_LOGGER_NAME)

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            root.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(config.console_level)
    console.setFormatter(logging.Formatter(
        CONSOLE_FORMAT_TIMESTAMPED if config.console_timestamps else CONSOLE_FORMAT
    ))
    setattr(console, _HANDLER_ATTR, True)
    root.addHandler(console)

    levels = [config.console_level]
    if config.log_file is not None:
        path = Path(config.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode='w')
        file_handler.setLevel(config.file_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        setattr(file_handler, _HANDLER_ATTR, True)
        root.addHandler(file_handler)
        levels.append(config.file_level)

    root.setLevel(min(levels))
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``rvaccel`` hierarchy ('cli' -> 'rvaccel.cli')."""
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
