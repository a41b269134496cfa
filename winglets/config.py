"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    winglets_env: str = "development"
    winglets_log_level: str = "info"

    # Engine defaults
    winglets_max_workers: int = 4
    winglets_grid_resolution: int = 100

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
