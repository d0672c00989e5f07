#!/usr/bin/env python3
"""
Logging configuration for wikibridge scripts.

The library itself only calls logging.getLogger(); applications decide
where records go. This module is the default for the bundled scripts:
console plus a rotating log file.

Loggers used by the library:
    wikibridge.<host>       Wiki, its backend and transport (default logger)
    wikibridge.transport    Transport created without a logger

Passing the logger returned by setup_logging() to Wiki routes all of them
to the script's handlers instead. Levels may be given by name, as they are
in config.json ("logging.level"), and the console handler writes to stderr
so script output on stdout stays machine-readable. WIKIBRIDGE_LOG_DIR
overrides the default ./logs directory.

Usage:
    from wikibridge.logging_config import setup_logging

    logger = setup_logging(
        name="page-history",
        wiki_id="enwiki",
        log_dir="/var/log/wikibridge",  # Optional, defaults to ./logs
    )
    wiki = Wiki("https://en.wikipedia.org/w/", logger=logger)
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_DIR_ENV = "WIKIBRIDGE_LOG_DIR"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    name: str,
    wiki_id: Optional[str] = None,
    log_dir: Optional[str] = None,
    level: Union[int, str] = logging.INFO,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    console: bool = True,
) -> logging.Logger:
    """
    Set up logging to a rotating file and, optionally, the console.

    Args:
        name: Logger name (also used in the log filename)
        wiki_id: Wiki identifier for the log filename (e.g., "enwiki")
        log_dir: Directory for log files (default: get_log_dir())
        level: Logging level, as a number or a name such as "DEBUG"
        max_bytes: Max log file size before rotation
        backup_count: Number of rotated log files to keep
        console: Whether to also log to stderr

    Returns:
        Configured logger instance

    Log files are named {wiki_id}-{name}.log (e.g., enwiki-page-history.log)
    """
    if isinstance(level, str):
        level_name = level
        level = logging.getLevelName(level_name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level_name}")

    log_path = Path(log_dir) if log_dir is not None else get_log_dir()
    log_path.mkdir(parents=True, exist_ok=True)

    log_file = log_path / (f"{wiki_id}-{name}.log" if wiki_id else f"{name}.log")

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Re-initialization replaces handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # stdout is reserved for script output
    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.debug(f"Logging initialized: {log_file}")
    return logger


def get_log_dir(default: str = "./logs") -> Path:
    """
    Get the log directory from the environment or the default.

    Checks the WIKIBRIDGE_LOG_DIR environment variable first.
    """
    return Path(os.environ.get(LOG_DIR_ENV, default))
