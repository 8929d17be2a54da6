"""
Logging setup.

Every module logs through `from app.core.logging import logger`. The stdout
sink is JSON-serialized in production and colorized elsewhere; a rotating file
sink can be enabled through settings.
"""

import sys

from loguru import logger

from .config import settings


def setup_logging() -> None:
    """Replace loguru's default handler with the configured sinks."""
    logger.remove()

    log_settings = settings.logging
    logger.add(
        sys.stdout,
        format=log_settings.format,
        level=log_settings.level,
        colorize=not log_settings.serialize,
        serialize=log_settings.serialize,
        backtrace=not log_settings.serialize,
        diagnose=settings.debug,
    )

    if log_settings.file_enabled:
        logger.add(
            log_settings.file_path,
            format=log_settings.format,
            level=log_settings.level,
            rotation="10 MB",
            retention="14 days",
            enqueue=True,
        )

    logger.info(f"Logging initialized for environment: {settings.environment.value}")


setup_logging()
