"""
Logging configuration
"""

import sys
from typing import Optional

from loguru import logger


TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> "
    "<dim>{extra}</dim>"
)


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None):
    """Setup logging configuration"""
    from taxoai.core.config import settings

    level = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format

    # Remove default handler
    logger.remove()

    if log_format == "json":
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=TEXT_FORMAT, colorize=True)


# Create logger instance
log = logger
