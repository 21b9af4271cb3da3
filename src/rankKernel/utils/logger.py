"""
Logging utilities for rankKernel.

Every component asks for its own named logger; the CLI calls
``setup_logging`` once to route everything to the console and a run log.
"""

import logging
import os
import sys
from typing import Optional, Union
from pathlib import Path

LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# set by setup_logging; loggers created afterwards start at this level
_state = {"level": logging.INFO, "log_file": None, "log_format": None}


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a logger instance for the given component name.

    Args:
        name: Logger name, usually the component class name
        level: Logging level (default: the level given to setup_logging)

    Returns:
        Logger instance
    """
    if level is None:
        level = _state["level"]
    logger = logging.getLogger(f"rankKernel.{name}")

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

        logger.addHandler(console_handler)
        logger.setLevel(level)

        # run.log handlers live on the root logger
        logger.propagate = True

    return logger


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    log_format: Optional[str] = None
) -> None:
    """
    Configure the root logger for a CLI run.

    Component loggers keep their console handler, so the root logger only
    receives a file handler here.

    Args:
        level: Logging level
        log_file: Optional log file path
        log_format: Optional custom log format
    """
    if log_format is None:
        log_format = LOG_FORMAT

    root = logging.getLogger()
    root.setLevel(level)

    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith("rankKernel.") and isinstance(logger, logging.Logger):
            logger.setLevel(level)
            for handler in logger.handlers:
                handler.setLevel(level)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=DATE_FORMAT))
        root.addHandler(file_handler)

    _state.update(level=level, log_file=str(log_file) if log_file else None, log_format=log_format)


def logging_state() -> dict:
    """Current logging settings, for handing to worker processes."""
    return dict(_state)


def ensure_logging(state: dict) -> None:
    """
    Apply ``state`` in a worker process.

    A no-op where the same run log is already attached (the parent process,
    thread workers), so each record is written once.
    """
    root = logging.getLogger()
    log_file = state.get("log_file")
    if log_file:
        target = os.path.abspath(log_file)
        file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
        if any(h.baseFilename == target for h in file_handlers):
            return
        # reused worker: drop the log of an earlier run
        for handler in file_handlers:
            root.removeHandler(handler)
            handler.close()
    elif _state["level"] == state.get("level"):
        return
    setup_logging(state.get("level", logging.INFO), log_file, state.get("log_format"))
