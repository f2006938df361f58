# Settings modules
from .app_settings import AppSettings, get_app_settings
from .engine_settings import EngineSettings
from .logging_settings import LoggingSettings

__all__ = [
    "AppSettings",
    "get_app_settings",
    "EngineSettings",
    "LoggingSettings",
]
