"""
Logging utilities for the Nest camera client.

Provides centralized logging configuration with file and console output,
rotation, and different log levels for different components.
"""

import functools
import logging
import logging.handlers
import os
import time
from datetime import datetime
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logger(
    name: str = "nestcam",
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: str = "logs",
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    console_output: bool = True,
    propagate: bool = True
) -> logging.Logger:
    """
    Set up a logger in the 'nestcam' hierarchy with file and console handlers.

    Calling it again for the same name only updates the level, so modules
    that ask for their component logger early do not pin it.

    Args:
        name: Logger name
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Specific log file name (if None, uses name-based default)
        log_dir: Directory to store log files
        max_file_size: Maximum size of each log file before rotation
        backup_count: Number of backup files to keep
        console_output: Whether to also output to console
        propagate: Whether records also reach the parent logger's handlers

    Returns:
        Configured logger instance
    """
    level = getattr(logging, log_level.upper())
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = propagate

    if logger.handlers:
        for handler in logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)
        return logger

    os.makedirs(log_dir, exist_ok=True)

    if log_file is None:
        log_file = f"{name}_{datetime.now().strftime('%Y%m%d')}.log"

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, log_file),
        maxBytes=max_file_size,
        backupCount=backup_count
    )
    file_handler.setLevel(logging.DEBUG)  # File gets whatever the logger lets through
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger

def get_auth_logger(log_dir: str = "logs", log_level: str = "INFO",
                    console_output: bool = False) -> logging.Logger:
    """Get a logger for token exchange and credential handling."""
    return setup_logger(
        name="nestcam.auth",
        log_level=log_level,
        log_file="auth.log",
        log_dir=log_dir,
        console_output=console_output,
        propagate=False
    )

def get_polling_logger(log_dir: str = "logs", log_level: str = "INFO",
                       console_output: bool = False) -> logging.Logger:
    """Get a logger for the snapshot and event feeds."""
    return setup_logger(
        name="nestcam.stream",
        log_level=log_level,
        log_file="polling.log",
        log_dir=log_dir,
        console_output=console_output,
        propagate=False
    )

def setup_application_logging(config: dict) -> logging.Logger:
    """
    Set up application-wide logging based on configuration.

    The auth and stream loggers write to their own files and do not pass
    records up to the main 'nestcam' logger; all three share the configured
    level and console setting.

    Args:
        config: Configuration dictionary with logging settings

    Returns:
        The main application logger
    """
    log_config = config.get('logging', {})
    log_dir = log_config.get('dir', 'logs')
    log_level = log_config.get('level', 'INFO')
    console_output = log_config.get('console', True)

    get_auth_logger(log_dir, log_level, console_output)
    get_polling_logger(log_dir, log_level, console_output)

    return setup_logger(
        name="nestcam",
        log_level=log_level,
        log_file=log_config.get('file', 'nestcam.log'),
        log_dir=log_dir,
        console_output=console_output
    )

def log_performance(logger: logging.Logger):
    """
    Decorator to log function execution time.

    Usage:
        @log_performance(logger)
        def refresh():
            ...
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                execution_time = time.perf_counter() - start_time
                logger.info(f"{func.__name__} completed in {execution_time:.3f}s")
                return result
            except Exception as e:
                execution_time = time.perf_counter() - start_time
                logger.error(f"{func.__name__} failed after {execution_time:.3f}s: {e}")
                raise
        return wrapper
    return decorator
