"""
Logging configuration for the bus network simulator.
"""

import logging
import os

LOG_DIR = "logs"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(level=logging.INFO):
    """Configure root logging for command-line runs."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def setup_logger(name, log_file=None):
    """Setup a logger for a component, optionally mirrored to logs/<log_file>.log"""
    logger = logging.getLogger(name)

    if log_file:
        os.makedirs(LOG_DIR, exist_ok=True)
        path = os.path.abspath(os.path.join(LOG_DIR, f"{log_file}.log"))
        already_attached = any(
            isinstance(handler, logging.FileHandler) and handler.baseFilename == path
            for handler in logger.handlers
        )
        if not already_attached:
            file_handler = logging.FileHandler(path)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            logger.addHandler(file_handler)

    return logger
