"""Logging and retry utilities.

``stopsignal.utilities.retry`` depends on the core package and is imported
from its own module.
"""

from stopsignal.utilities.logger import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
]
