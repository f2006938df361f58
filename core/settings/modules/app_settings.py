from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from core.settings.modules.engine_settings import EngineSettings
from core.settings.modules.logging_settings import LoggingSettings


class AppSettings(BaseModel):
    """
    Application settings aggregator.
    Each section is loaded only when get_app_settings() is first called,
    never at import time.
    """

    model_config = ConfigDict(extra="ignore")

    engine: EngineSettings
    logging: LoggingSettings


@lru_cache()
def get_app_settings() -> AppSettings:
    return AppSettings(
        engine=EngineSettings(),
        logging=LoggingSettings(),
    )
