"""Logging configuration for the cool-off tracker."""
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import config

try:
    from systemd.journal import JournalHandler
    HAS_SYSTEMD = True
except ImportError:
    HAS_SYSTEMD = False

ROOT_LOGGER = "cooloff_tracker"


def setup_logging(
    log_level: str = "INFO",
    use_systemd: bool = False,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_systemd: Whether to use systemd journal handler
        log_file: Optional path to log file

    Returns:
        Configured logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Remove existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if use_systemd and HAS_SYSTEMD:
        journal_handler = JournalHandler(SYSLOG_IDENTIFIER=ROOT_LOGGER)
        journal_handler.setFormatter(formatter)
        logger.addHandler(journal_handler)
    else:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger.

    Args:
        name: Logger name (will be prefixed with 'cooloff_tracker.' unless it already is)

    Returns:
        Logger instance
    """
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging() -> logging.Logger:
    """Set up logging from the `logging.*` config keys.

    Returns:
        Configured package logger
    """
    log_file = config.get('logging.file')
    return setup_logging(
        log_level=config.get('logging.level', 'INFO'),
        use_systemd=bool(config.get('logging.use_systemd', False)),
        log_file=Path(log_file) if log_file else None
    )
