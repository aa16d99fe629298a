"""
Logger central de la aplicación.

Todos los módulos usan ``from app.utils.logger import logger``.
"""
import logging

from app.core.config import settings


def setup_logger(name: str) -> logging.Logger:
    """
    Configura un logger con salida a consola.

    Args:
        name: Nombre del logger

    Returns:
        Logger configurado
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    # Evitar duplicar handlers
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(settings.log_format))
    logger.addHandler(handler)

    return logger


logger = setup_logger("rh_backend")
