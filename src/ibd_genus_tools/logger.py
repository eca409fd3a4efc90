# ibd_genus_tools/logger.py
"""
Logging functionality for IBD Genus Tools.
"""

import os
import logging

LOGGER_NAME = 'ibd_genus_tools'

def setup_logger(log_file=None, log_level=logging.INFO):
    """
    Setup logger for IBD Genus Tools.

    Args:
        log_file: Path to log file (optional)
        log_level: Logging level (default: INFO)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplication
    if logger.handlers:
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers = []

    ch = logging.StreamHandler()
    ch.setLevel(log_level)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        fh = logging.FileHandler(log_file)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger

def log_print(message, level='info'):
    """
    Print message to console and log with the specified level.

    Args:
        message: Message to print and log
        level: Logging level (info, debug, warning, error, critical)
    """
    print(message)

    logger = logging.getLogger(LOGGER_NAME)

    if level.lower() == 'debug':
        logger.debug(message)
    elif level.lower() == 'warning':
        logger.warning(message)
    elif level.lower() == 'error':
        logger.error(message)
    elif level.lower() == 'critical':
        logger.critical(message)
    else:
        logger.info(message)
