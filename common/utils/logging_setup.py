"""
Logging configuration for the network configuration manager.
Sets up logging with file and console handlers.
"""
import os
import logging
import logging.handlers
import sys
from typing import Optional


def setup_logging(
    app_name: str = "router",
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_to_console: bool = True,
    log_format: Optional[str] = None,
    max_size: int = 10485760,  # 10 MB
    backup_count: int = 5,
    include_process_info: bool = False
) -> logging.Logger:
    """
    Configure logging for the application

    All module loggers live below app_name ("router.dns", "router.monitor",
    ...), so configuring it covers the whole package.

    Args:
        app_name: Name of the top-level logger
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (None for no file logging)
        log_to_console: Whether to log to console
        log_format: Custom log format (None for default)
        max_size: Maximum log file size in bytes
        backup_count: Number of backup log files
        include_process_info: Include process ID and thread name in logs

    Returns:
        Configured logger
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(app_name)
    logger.setLevel(numeric_level)

    # Clear existing handlers to avoid duplicate logging
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if not log_format:
        if include_process_info:
            log_format = '%(asctime)s - %(name)s - [%(process)d:%(threadName)s] - %(levelname)s - %(message)s'
        else:
            log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    formatter = logging.Formatter(log_format)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir and not os.path.exists(log_dir):
                os.makedirs(log_dir)

            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=max_size,
                backupCount=backup_count
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

            logger.info(f"Logging to file: {log_file}")
        except OSError as e:
            logger.error(f"Failed to setup file logging: {e}")

    logger.debug(f"Logging initialized for {app_name} at level {log_level}")

    return logger
