"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "unisphere"

    # JWT Auth (sessions are issued by the auth collaborator)
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Student activity policy
    highly_active_window_days: int = 30
    low_activity_window_days: int = 60
    highly_active_min_count: int = 3
    needs_attention_limit: int = 8
    top_companies_limit: int = 5
    top_jobs_limit: int = 5
    trend_months: int = 6

    # Parallel snapshot loading (one worker per source collection)
    snapshot_workers: int = 4

    # Keep the dashboard live via change streams (needs a replica set)
    live_updates: bool = False

    # App
    debug: bool = False
    log_level: str = "INFO"

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
