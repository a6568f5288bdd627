"""Logging helpers for the Dialog Simulation Engine."""

import sys
from pathlib import Path
from typing import Union

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:^7} | {file.name}:{line} | {message}"


def configure_logger(
    source: str,
    logs_dir: Union[str, Path] = "logs",
    console_level: str = "ERROR",
) -> Path:
    """Configure Loguru sinks for a process and return the log file path."""
    logger.remove()

    # Console handler, ERROR and above unless overridden
    logger.add(sink=sys.stderr, level=console_level, format=LOG_FORMAT)

    # File handler, DEBUG+, rotated daily, keep 7 days, zipped
    logs_path = Path(logs_dir)
    logs_path.mkdir(parents=True, exist_ok=True)
    log_path = logs_path / f"{source}_{'{time:YYYYMMDD}'}.log"

    logger.add(
        sink=str(log_path),
        level="DEBUG",
        format=LOG_FORMAT,
        rotation="00:00",
        retention="7 days",
        compression="zip",
    )

    logger.info(
        f"Logger configured for source '{source}'. "
        f"Sinks: stderr (level={console_level}+), file (level=DEBUG+) at "
        f"'{log_path}'. Rotation daily at midnight, retention 7 days, zipped."
    )
    return log_path
