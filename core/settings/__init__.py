# Settings package
from core.settings.modules import AppSettings, EngineSettings, LoggingSettings, get_app_settings

__all__ = ["get_app_settings", "AppSettings", "EngineSettings", "LoggingSettings"]
