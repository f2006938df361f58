from __future__ import annotations

from pydantic import Field

from core.settings.base import DagflowBaseSettings


class EngineSettings(DagflowBaseSettings):
    """
    Workflow engine settings.
    Loaded from the environment / .env with exact variable name matching.
    """

    # Linear backoff unit: retry k waits retry_backoff_seconds * k
    retry_backoff_seconds: float = Field(1.0, ge=0, alias="DAGFLOW_RETRY_BACKOFF_SECONDS")
    # 1 keeps the declared-order serial schedule
    max_concurrency: int = Field(1, ge=1, alias="DAGFLOW_MAX_CONCURRENCY")
    allow_overwrite: bool = Field(False, alias="DAGFLOW_ALLOW_OVERWRITE")
