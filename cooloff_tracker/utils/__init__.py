"""Shared configuration and logging helpers."""

from .config import Config, config
from .logging import configure_logging, get_logger, setup_logging

__all__ = [
    'Config',
    'config',
    'configure_logging',
    'get_logger',
    'setup_logging',
]
