"""
Loguru setup: colored console output plus an optional rotating log file.
"""
from datetime import datetime, timezone
from typing import Optional
import os
import sys

from loguru import logger


def setup_logger(
    log_dir: Optional[str] = None,
    level: str = "INFO",
    rotation: str = "20 MB",
    enable_colors: bool = True,
) -> Optional[str]:
    """
    Replace loguru's default handler with a console sink (and a file sink when
    `log_dir` is given). Returns the log file path, if any.
    """
    logger.remove()

    colorize = enable_colors and sys.stderr.isatty()
    if colorize:
        console_format = (
            "<green>{time:HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<blue>{function}</blue> | "
            "<level>{message}</level>"
        )
    else:
        console_format = "{time:HH:mm:ss.SSS} | {level: <8} | {name}:{function} | {message}"
    logger.add(sys.stderr, level=level, format=console_format, colorize=colorize)

    if log_dir is None:
        return None
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"evo_cars_{timestamp}.log")
    logger.add(
        log_file,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
        rotation=rotation,
        encoding="utf-8",
    )
    logger.info("Logging to {}", log_file)
    return log_file
