"""
Configuracion de loguru para el sync.
"""
import sys

from loguru import logger

from tapes.core.config import Settings


def configure_logging(settings: Settings) -> None:
    """
    Reemplaza el sink por defecto de loguru por stderr + archivo rotativo.

    Args:
        settings: Configuracion con LOG_LEVEL y LOG_FILE
    """
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL)
    if settings.LOG_FILE:
        logger.add(
            settings.LOG_FILE,
            rotation="500 MB",
            retention="10 days",
            level=settings.LOG_LEVEL,
        )
