from __future__ import annotations

from pydantic import Field, field_validator

from core.settings.base import DagflowBaseSettings


class LoggingSettings(DagflowBaseSettings):
    """Logger level and format."""

    log_level: str = Field("INFO", alias="DAGFLOW_LOG_LEVEL")
    log_format: str = Field(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        alias="DAGFLOW_LOG_FORMAT",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level
