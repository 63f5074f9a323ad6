# portal_chat/core/logging.py
"""Logging configuration."""
import logging
import sys

from .config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

def setup_logging(level: str = None):
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # SQL echo is controlled by the engine, keep the root logger readable
    logging.getLogger("sqlalchemy.engine").propagate = settings.environment == "development"
