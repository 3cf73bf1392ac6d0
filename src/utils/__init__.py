"""
Utility helpers for the secret manager extension
"""

from .logger import get_logger, get_category_logger, configure_logger, parse_level

__all__ = [
    'get_logger',
    'get_category_logger',
    'configure_logger',
    'parse_level',
]
