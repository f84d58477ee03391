# demo_mailer/core/__init__.py
"""
Core package for configuration, logging, and shared error types.
"""

from demo_mailer.core.config import Settings, settings
from demo_mailer.core.logging import configure_structlog, get_structlog_logger

__all__ = [
    "Settings",
    "settings",
    "configure_structlog",
    "get_structlog_logger",
]
