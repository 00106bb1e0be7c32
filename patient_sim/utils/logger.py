"""
Logger utility - Configures logging for patient simulator sessions.
"""

import logging
import logging.handlers
import os
from pathlib import Path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'


def setup_logging(log_level: str = "INFO", log_dir: str = "logs", console: bool = True):
    """Setup application logging."""

    level = getattr(logging, log_level.upper(), logging.INFO)

    # Create logs directory
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers so repeated setup does not duplicate output
    root_logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING if level > logging.INFO else logging.INFO)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(console_handler)

    file_format = logging.Formatter(FILE_LOG_FORMAT)

    # Session log
    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, 'patient_sim.log'),
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(file_format)
    root_logger.addHandler(file_handler)

    # Errors only
    error_handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, 'errors.log'),
        maxBytes=5*1024*1024,  # 5MB
        backupCount=3
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(file_format)
    root_logger.addHandler(error_handler)

    logging.getLogger(__name__).info(f"Logging configured (level={log_level.upper()}, dir={log_dir})")
