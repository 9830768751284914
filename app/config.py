from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    game_ttl_hours: int = 720
    default_holes: int = 9
    gcs_bucket_name: str | None = None
    gcs_history_prefix: str = "wolf-history"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
