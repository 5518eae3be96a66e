"""
Shared logging setup for xlcompare.

Console logging goes to stderr so that diff output on stdout stays clean.
A detailed file log is written only when a log directory is given.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class ColourFormatter(logging.Formatter):
    """
    Formatter with colour support for console output.
    """

    # ANSI colour codes
    COLOURS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m',
    }

    def __init__(self, fmt=None, datefmt=None, use_colour: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colour = use_colour

    def format(self, record):
        """Format log record, colouring the level name without mutating the record."""
        formatted = super().format(record)
        levelname = record.levelname
        if not self.use_colour or levelname not in self.COLOURS:
            return formatted
        coloured = f"{self.COLOURS[levelname]}{levelname:<8}{self.COLOURS['RESET']}"
        return formatted.replace(f"{levelname:<8}", coloured, 1)


def resolve_level(log_level: str) -> int:
    """
    Map a level name to a logging level.

    Raises:
        ValueError: If the name is not a standard level
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


def setup_logging(log_level: str = 'INFO', log_dir: Optional[str] = None, component: str = 'xlcompare'):
    """
    Set up logging for the application.

    Configures:
    - Console: coloured output on stderr at the given level
    - File: detailed DEBUG output, only when log_dir is set

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files (None = no file log)
        component: Component name for log filename

    Returns:
        Root logger
    """
    level = resolve_level(log_level)

    logger = logging.getLogger()
    logger.setLevel(min(level, logging.DEBUG) if log_dir else level)

    # Remove existing handlers
    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColourFormatter(
        '[%(asctime)s] %(levelname)-8s | %(name)-12s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        use_colour=sys.stderr.isatty(),
    ))
    logger.addHandler(console_handler)

    if log_dir is None:
        logger.debug(f"Logging initialised (level: {log_level.upper()})")
        return logger

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    log_file = log_path / f'{component}_{timestamp}.log'

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)  # Always DEBUG in file
    file_handler.setFormatter(logging.Formatter(
        '[%(asctime)s] %(levelname)-8s | %(name)-12s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(file_handler)

    logger.info(f"Logging initialised (level: {log_level.upper()}, file: {log_file})")

    return logger
