import sys
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = "<level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def configure_logging(verbose: bool = True, logfile: Optional[str] = None):
    """Replace loguru's default sink with the solver's console (and optional file) sinks"""
    logger.remove()
    logger.add(sys.stderr, level="INFO" if verbose else "WARNING", format=CONSOLE_FORMAT)
    if logfile:
        logger.add(logfile, level="DEBUG", format=FILE_FORMAT, mode="w")
    return logger
