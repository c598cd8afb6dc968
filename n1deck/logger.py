"""Logging configuration for the n+1 flashcard deck builder."""

import logging
import sys
import threading
from datetime import datetime
from pathlib import Path

import config

# Serializes multi-line output from concurrent image workers
LOG_LOCK = threading.Lock()


def setup_logger(
    name: str = "n1deck",
    log_file: str | None = None,
    level: int = logging.INFO,
    step: str = "all",
    logs_dir: Path = config.LOGS_DIR,
) -> logging.Logger:
    """
    Set up and return a configured logger.

    Args:
        name: Logger name
        log_file: Optional specific log file name. If None, generates a
            "<step>_<timestamp>.log" name so sentence and image runs are told apart.
        level: Logging level
        step: Pipeline step this run executes
        logs_dir: Directory for log files

    Returns:
        Configured logger instance
    """
    logs_dir.mkdir(parents=True, exist_ok=True)

    if log_file is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = f"{step}_{timestamp}.log"

    log_path = logs_dir / log_file

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_formatter = logging.Formatter("%(message)s")

    # File handler - captures everything
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    # Console handler - for user-facing output
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    logger.info(f"Log file: {log_path}")

    return logger


def get_logger(name: str = "n1deck") -> logging.Logger:
    """
    Get an existing logger by name.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def emit_logs(logger: logging.Logger, events: list[tuple[int, str]]) -> None:
    """
    Emit a batch of buffered log events without interleaving.

    Args:
        logger: Logger to write to
        events: (level, message) pairs collected by one job
    """
    with LOG_LOCK:
        for level, message in events:
            if message:
                logger.log(level, message)
