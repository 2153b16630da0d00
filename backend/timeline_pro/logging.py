"""
Logging configuration for the Timeline Pro API.
"""

import logging
import sys

from timeline_pro.config import settings

# Capped at WARNING; they log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging() -> logging.Logger:
    """
    Configure stdout logging once for the whole process.

    :return: The ``timeline_pro`` parent logger
    :rtype: logging.Logger
    """
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger('timeline_pro')


def get_logger(name: str) -> logging.Logger:
    """Child of the ``timeline_pro`` logger, e.g. ``get_logger('services.sheets')``."""
    return logging.getLogger(f'timeline_pro.{name}')
