"""Application settings powered by Pydantic BaseSettings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    enable_cache: bool = Field(default=False, validation_alias="ENABLE_CACHE")
    cache_dir: Path = Field(default=Path(".cache/html"), validation_alias="CACHE_DIR")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "console"] = Field(
        default="json", validation_alias="LOG_FORMAT"
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Get the process settings, read from the environment once."""
    return AppSettings()
