"""Engine configuration loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fastoapi3.constants import DEFAULT_INFO_VERSION, DEFAULT_SCHEMA_PATH, DEFAULT_SCHEMA_UI_PATH


class Settings(BaseSettings):
    """Defaults applied to every engine created without explicit settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    schema_path: str = Field(default=DEFAULT_SCHEMA_PATH, validation_alias="OPENAPI_SCHEMA_PATH")
    schema_ui_path: str = Field(
        default=DEFAULT_SCHEMA_UI_PATH, validation_alias="OPENAPI_SCHEMA_UI_PATH"
    )
    disable_schema: bool = Field(default=False, validation_alias="OPENAPI_DISABLE_SCHEMA")

    title: str | None = Field(default=None, validation_alias="OPENAPI_TITLE")
    version: str = Field(default=DEFAULT_INFO_VERSION, validation_alias="OPENAPI_VERSION")

    port: int | None = Field(default=None, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the engine settings."""

    return Settings()
