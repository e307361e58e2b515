from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Local dev: load from .env automatically.
    # In production: you typically inject real env vars instead.
    model_config = SettingsConfigDict(
        env_prefix="", extra="ignore", env_file=".env", env_file_encoding="utf-8", populate_by_name=True
    )

    # Env vars:
    # - USER_DB_NAME: database holding the "users" collection
    # - USER_DB_URL: MongoDB connection string
    # - USER_DB_RESET: drop and recreate the collection on startup (destructive)
    # - USER_STORE_BACKEND: "mongo" (default) or "memory" for an in-process store
    # - LOG_LEVEL (optional)
    user_db_name: str = Field(default="user_directory", validation_alias="USER_DB_NAME")
    user_db_url: str = Field(default="mongodb://localhost:27017", validation_alias="USER_DB_URL")
    user_db_reset: bool = Field(default=False, validation_alias="USER_DB_RESET")

    user_store_backend: str = Field(default="mongo", validation_alias="USER_STORE_BACKEND")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    def model_post_init(self, __context):  # type: ignore[override]
        self.user_store_backend = (self.user_store_backend or "mongo").lower().strip()


def get_settings() -> Settings:
    """Load settings from environment.

    Keep this as the single canonical constructor for Settings(). FastAPI
    dependencies and tests can override/monkeypatch this function.
    """
    return Settings()
