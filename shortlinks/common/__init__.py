"""Common utilities for the short link service."""

from .validators import is_valid_url, is_non_negative
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "is_non_negative",
    "setup_logging",
    "get_logger",
]
