"""
Test settings loading from the environment.

Verifies that every settings section reads its DAGFLOW_* variables,
applies defaults, and rejects invalid values.
"""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.settings import EngineSettings, LoggingSettings, get_app_settings
from orchestration import WorkflowDefinition, WorkflowStep, create_default_engine


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # Run from an empty directory so no stray .env file is read
    monkeypatch.chdir(tmp_path)
    for key in (
        "DAGFLOW_RETRY_BACKOFF_SECONDS",
        "DAGFLOW_MAX_CONCURRENCY",
        "DAGFLOW_ALLOW_OVERWRITE",
        "DAGFLOW_LOG_LEVEL",
        "DAGFLOW_LOG_FORMAT",
    ):
        monkeypatch.delenv(key, raising=False)
    get_app_settings.cache_clear()
    yield
    get_app_settings.cache_clear()


def test_engine_settings_defaults():
    settings = EngineSettings()

    assert settings.retry_backoff_seconds == 1.0
    assert settings.max_concurrency == 1
    assert settings.allow_overwrite is False


def test_engine_settings_from_env(monkeypatch):
    monkeypatch.setenv("DAGFLOW_RETRY_BACKOFF_SECONDS", "0.25")
    monkeypatch.setenv("DAGFLOW_MAX_CONCURRENCY", "8")
    monkeypatch.setenv("DAGFLOW_ALLOW_OVERWRITE", "true")

    settings = EngineSettings()

    assert settings.retry_backoff_seconds == 0.25
    assert settings.max_concurrency == 8
    assert settings.allow_overwrite is True


def test_engine_settings_from_env_file(tmp_path):
    (tmp_path / ".env").write_text("DAGFLOW_MAX_CONCURRENCY=3\n", encoding="utf-8")

    assert EngineSettings().max_concurrency == 3


def test_engine_settings_reject_invalid_values(monkeypatch):
    monkeypatch.setenv("DAGFLOW_MAX_CONCURRENCY", "0")

    with pytest.raises(ValidationError):
        EngineSettings()


def test_logging_settings_normalize_level(monkeypatch):
    monkeypatch.setenv("DAGFLOW_LOG_LEVEL", "debug")

    assert LoggingSettings().log_level == "DEBUG"


def test_logging_settings_reject_unknown_level(monkeypatch):
    monkeypatch.setenv("DAGFLOW_LOG_LEVEL", "chatty")

    with pytest.raises(ValidationError):
        LoggingSettings()


def test_app_settings_are_cached(monkeypatch):
    monkeypatch.setenv("DAGFLOW_MAX_CONCURRENCY", "2")

    settings = get_app_settings()

    assert settings is get_app_settings()
    assert settings.engine.max_concurrency == 2
    assert settings.logging.log_level == "INFO"


def test_default_engine_uses_app_settings(monkeypatch):
    monkeypatch.setenv("DAGFLOW_ALLOW_OVERWRITE", "1")

    async def noop(input_: dict) -> dict:
        return {}

    engine = create_default_engine()
    first = WorkflowDefinition(id="w", name="First", steps=[WorkflowStep("a", "A", noop)])
    second = WorkflowDefinition(id="w", name="Second", steps=[WorkflowStep("a", "A", noop)])

    engine.register_workflow(first)
    engine.register_workflow(second)

    assert engine.get_workflow("w") is second
    assert engine.list_workflows() == ["w"]
