from __future__ import annotations

import logging

from treino.config import Settings, configure_logging, get_settings


def test_settings_defaults(monkeypatch) -> None:
    for name in ("LOG_LEVEL", "MAX_REPAIR_ITERATIONS", "METRICS_BUFFER_SIZE"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()

    assert settings.LOG_LEVEL == "INFO"
    assert settings.MAX_REPAIR_ITERATIONS == 1
    assert settings.METRICS_BUFFER_SIZE == 10000
    assert "APP_ENV" not in Settings.model_fields


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("MAX_REPAIR_ITERATIONS", "3")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings()
    assert settings.MAX_REPAIR_ITERATIONS == 3
    assert settings.LOG_LEVEL == "debug"


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


def test_configure_logging_sets_package_level() -> None:
    configure_logging()
    assert logging.getLogger("treino").level == logging.getLevelName(get_settings().LOG_LEVEL.upper())
