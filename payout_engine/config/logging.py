"""
Logging configuration.

Configures loguru sinks for workers and the scheduler.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from payout_engine.config.settings import settings


def setup_logging(component: str = "worker") -> None:
    """
    Configure logger with stderr output and file rotation.

    Args:
        component: Process name shown in the startup message
    """
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    logger.add(
        settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        encoding="utf-8",
    )

    logger.info(f"Starting payout engine {component}...")
