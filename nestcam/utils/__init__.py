"""
Utility functions and helpers.

Common utility functions used across the application.
"""

from .logger import (
    setup_logger,
    get_auth_logger,
    get_polling_logger,
    setup_application_logging,
    log_performance
)

__all__ = [
    "setup_logger",
    "get_auth_logger",
    "get_polling_logger",
    "setup_application_logging",
    "log_performance"
]
