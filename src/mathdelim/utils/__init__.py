"""Utility modules for mathdelim.

Provides:
- logger: get_logger for logging
"""

from mathdelim.utils.logger import get_logger

__all__ = [
    "get_logger",
]
