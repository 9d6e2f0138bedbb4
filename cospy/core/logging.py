"""Logging utilities for cospy modules."""

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger that automatically inherits from root logger.

    Loggers work with basicConfig() without explicit setup_logging() calls.
    The logger will:
    - Propagate to root logger (default behavior)
    - Only set a default level if root logger has no handlers

    Args:
        name: Logger name (typically 'cospy.<component>')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logger.setLevel(logging.WARNING)

    return logger
