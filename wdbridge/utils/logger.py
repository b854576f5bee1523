"""API-level diagnostic logging for WD Bridge (wdbridge)."""

import logging
from rich.console import Console
from rich.logging import RichHandler

API_LOGGER_NAME = "wdbridge.api"

console = Console(stderr=True)


def get_api_logger():
    """Return the API logger, attaching the rich handler on first use."""
    logger = logging.getLogger(API_LOGGER_NAME)
    if not logger.handlers:
        handler = RichHandler(console=console, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("[API] %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.WARNING)
        logger.propagate = False
    return logger


def enable_api_messages(level=logging.DEBUG):
    """Show API messages from ``level`` upwards."""
    logger = get_api_logger()
    logger.disabled = False
    logger.setLevel(level)


def disable_api_messages():
    """Silence all API messages."""
    get_api_logger().disabled = True
