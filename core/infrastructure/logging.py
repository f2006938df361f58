"""
Logging infrastructure.

Provides the logger factory used by the engine, registry and event bus.
"""
import logging


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance.
    
    The first call for a name attaches a stream handler using the format
    and level from LoggingSettings.
    
    Args:
        name: Logger name (usually module name)
    
    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        # Imported lazily so settings are not read at import time
        from core.settings import LoggingSettings

        settings = LoggingSettings()
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(settings.log_format))
        logger.addHandler(handler)
        logger.setLevel(settings.log_level)
    return logger
