"""
Utility functions and helpers.
"""

from .log_utils import configure_logging, configure_from_name, get_logger

__all__ = ["configure_logging", "configure_from_name", "get_logger"]
