import sys
from pathlib import Path
from typing import Optional

import loguru

DEFAULT_LOG_FILE = Path.home() / ".aireview" / "aireview.log"


def setup_logger(log_level: str = "INFO", log_file: Optional[Path] = DEFAULT_LOG_FILE):
    """
    Set up a logger with console and file handlers.

    Args:
        log_level (str): The minimum level of logs to display on stderr.
        log_file (Path): The file to which debug logs are written. ``None`` disables it.
    """
    loguru.logger.remove()  # Remove default handler

    # Console logger
    loguru.logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True,
    )

    if log_file is not None:
        loguru.logger.add(
            str(log_file),
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="10 MB",
            retention="7 days",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )

    return loguru.logger


# Console only until the CLI configures the file sink
logger = setup_logger(log_file=None)
