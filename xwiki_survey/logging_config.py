#!/usr/bin/env python3
"""
Logging configuration for cross-wiki surveys.

Sets up the "xwiki_survey" logger hierarchy to log to a rotating file and,
optionally, the console. Per-wiki sessions log as children of it
(xwiki_survey.wiki_api.<hostname>), so one setup call covers the whole run.

Usage:
    from xwiki_survey.logging_config import setup_logging

    logger = setup_logging(username="Example")
    logger.info("Starting survey...")
"""

import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def log_filename(name: str, username: Optional[str] = None) -> str:
    """
    Build the log filename for a run.

    Args:
        name: Logger name
        username: Surveyed user; characters unsafe in filenames become "_"

    Returns:
        "{username}-{name}.log" or "{name}.log"
    """
    if username:
        safe = re.sub(r"[^\w.-]+", "_", username).strip("_") or "user"
        return f"{safe}-{name}.log"
    return f"{name}.log"


def setup_logging(
    name: str = "xwiki_survey",
    username: Optional[str] = None,
    log_dir: Optional[str] = None,
    level: int = logging.INFO,
    max_bytes: int = 5 * 1024 * 1024,  # 5 MB
    backup_count: int = 3,
    console: bool = True,
) -> logging.Logger:
    """
    Set up logging to console and file.

    Args:
        name: Logger name (root of the hierarchy to configure)
        username: Surveyed user, included in the log filename
        log_dir: Directory for log files (default: LOG_DIR env var or ./logs)
        level: Logging level (default: INFO)
        max_bytes: Max log file size before rotation
        backup_count: Number of rotated log files to keep
        console: Whether to also log to stderr

    Returns:
        Configured logger instance
    """
    log_path = Path(log_dir) if log_dir else get_log_dir()
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / log_filename(name, username)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Re-initialization replaces earlier handlers
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

    # Report goes to a file, so progress goes to stderr
    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.debug(f"Logging initialized: {log_file}")
    return logger


def get_log_dir(default: str = "./logs") -> Path:
    """
    Get the log directory from environment or default.

    Checks LOG_DIR environment variable first.
    """
    return Path(os.environ.get("LOG_DIR", default))
