import sys
from typing import Optional
from loguru import logger
from fuelflow.config import get_config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[env]}</magenta> | <cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

class AppLogger:
    """Process-wide loguru setup for FuelFlow.

    The stderr sink is (re)installed only when the configured level or
    environment changes, so modules can ask for a logger at import time.
    """
    _installed: Optional[tuple] = None

    def __init__(self) -> None:
        config = get_config()
        settings = (config.log_level.upper(), config.app_env)
        if AppLogger._installed != settings:
            logger.remove()
            logger.configure(extra={"name": "fuelflow", "env": config.app_env})
            logger.add(sink=sys.stderr, level=settings[0], format=LOG_FORMAT)
            AppLogger._installed = settings
        self.logger = logger

    def get_logger(self, name: str = None):
        """Get the configured logger instance.

        Args:
            name (str, optional): Module name shown in each line. Defaults to None.
        Returns:
            loguru.Logger: The configured logger instance.
        """
        if name:
            return self.logger.bind(name=name)
        return self.logger

def get_logger(name: str = None):
    """Get an application logger using the latest config."""
    return AppLogger().get_logger(name)
