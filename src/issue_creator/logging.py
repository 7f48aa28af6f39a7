"""Centralized logging configuration for issue-creator.

Console logging for every run, plus rotating file logs when a log directory is given.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Default configuration
DEFAULT_LOG_FILE = "issue-creator.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

# Log format
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str | None = None,
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    console: bool = True,
) -> logging.Logger:
    """Set up logging for a single issue-creator run.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to INFO.
               Can be overridden with ISSUE_CREATOR_LOG_LEVEL environment variable.
        log_dir: Directory for log files. File logging is disabled when neither
                 this nor the ISSUE_CREATOR_LOG_DIR environment variable is set.
        log_file: Log file name. Defaults to 'issue-creator.log'.
        max_bytes: Maximum size per log file before rotation. Defaults to 10MB.
        backup_count: Number of backup files to keep. Defaults to 5.
        console: Whether to log to stderr. Defaults to True.

    Returns:
        The root issue_creator logger.
    """
    if level is None:
        level = os.environ.get("ISSUE_CREATOR_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("issue_creator")
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_dir is None:
        log_dir = os.environ.get("ISSUE_CREATOR_LOG_DIR")

    log_path = None
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / log_file
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.debug("issue-creator logging initialized (level=%s, file=%s)", level, log_path)

    return logger


def tail_output(output: str, max_lines: int = 40) -> str:
    """Keep the last lines of a guard script's output.

    A failing check usually reports why at the end, so earlier lines are the
    ones dropped.

    >>> tail_output("a\\nb\\nc", max_lines=2)
    '[1 earlier lines omitted]\\nb\\nc'
    """
    lines = output.rstrip("\n").splitlines()
    if len(lines) <= max_lines:
        return "\n".join(lines)
    kept = lines[-max_lines:] if max_lines > 0 else []
    return "\n".join([f"[{len(lines) - len(kept)} earlier lines omitted]", *kept])


_TOKEN_PATTERNS = [
    (re.compile(r"gh[pousr]_[a-zA-Z0-9]{36}"), "[GITHUB_TOKEN]"),
    (re.compile(r"github_pat_[a-zA-Z0-9_]{82}"), "[GITHUB_TOKEN]"),
    (re.compile(r"Bearer [a-zA-Z0-9._-]+"), "Bearer [REDACTED]"),
    (re.compile(r"token=[a-zA-Z0-9._-]+"), "token=[REDACTED]"),
]


def redact_tokens(text: str) -> str:
    """Mask GitHub tokens a guard script may have echoed.

    Scripts often run ``gh`` or ``curl`` with the same token the tool uses.
    """
    for pattern, replacement in _TOKEN_PATTERNS:
        text = pattern.sub(replacement, text)
    return text
