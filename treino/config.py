from __future__ import annotations

import logging
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    LOG_LEVEL: str = "INFO"

    # Pipeline policies
    MAX_REPAIR_ITERATIONS: int = 1

    # Metrics
    METRICS_BUFFER_SIZE: int = 10000
    RECENT_METRICS_LIMIT: int = 100
    TOP_REASONS_LIMIT: int = 5

    # Session rules
    MIN_EXERCISES_PER_DAY: int = 3
    SET_EXECUTION_SECONDS: int = 30
    MIN_REST_SECONDS: int = 45
    DEFAULT_REST_SECONDS: int = 60
    REPS_ADJUSTMENT_CAP: float = 0.3


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


def configure_logging() -> None:
    settings = get_settings()
    logger = logging.getLogger("treino")
    logger.setLevel(settings.LOG_LEVEL.upper())
    if not logging.getLogger().handlers and not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
