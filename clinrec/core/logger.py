import sys

from loguru import logger

from clinrec.core.constants import LOG_FILE

STDERR_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(level: str = "INFO", log_file: str = LOG_FILE, file_level: str = "DEBUG"):
    """
    Configure loguru sinks for the application.

    Args:
        level: Minimum level written to stderr
        log_file: Rotating log file path, or empty to skip file logging
        file_level: Minimum level written to the log file
    """
    logger.remove()  # Remove default handler

    # Add stderr handler only if available (not in windowed runs)
    if sys.stderr:
        logger.add(sys.stderr, format=STDERR_FORMAT, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="1 MB",
            retention="10 days",
            format=FILE_FORMAT,
            level=file_level,
        )

    return logger