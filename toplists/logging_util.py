import logging
import sys

# Configure logging format
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str = "toplists", level=logging.INFO) -> logging.Logger:
    """
    Sets up a logger with consistent formatting.

    Child loggers created with ``logging.getLogger(__name__)`` inside the
    ``toplists`` package propagate to the logger configured here.

    Args:
        name: Name of the logger (defaults to the package root)
        level: Logging level, as an int or a level name like "DEBUG"

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid adding handlers multiple times
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(console_handler)
    else:
        for handler in logger.handlers:
            handler.setLevel(level)

    return logger


def mask_id(value: str) -> str:
    """Shorten an id for log lines (first 8 chars)."""
    if not value:
        return "-"
    return value[:8]
