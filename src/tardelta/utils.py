"""Utility functions for tar-delta."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Configure loguru sinks.

    Args:
        level: Minimum level for the stderr sink
        log_file: Optional file receiving DEBUG and above, rotated at 10 MB
    """
    logger.remove()
    # Components bind their phase; records logged outside one show "-"
    logger.configure(extra={"phase": "-"})
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "{extra[phase]} | {message}",
    )
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
            backtrace=True,
            diagnose=False,
        )
