"""
Logging utilities.

The report goes to stdout, so every log record (including per-separation
progress at DEBUG level) is written to stderr and, optionally, a file.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "# %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    name: str = "ndautocorr",
) -> logging.Logger:
    """
    Configure the package logger for a command line run.

    Args:
        level: Logging level, as a number or a name such as "DEBUG"
        log_file: Optional path of a log file (parent directories are created)
        name: Logger name; records from ``ndautocorr.*`` modules propagate to it

    Returns:
        Configured logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger
