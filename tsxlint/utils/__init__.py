"""
tsxlint utilities module.
"""

from tsxlint.utils.config import Settings, get_settings
from tsxlint.utils.logging import LogContext, configure_logging, get_logger

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "get_logger",
    "configure_logging",
    "LogContext",
]
