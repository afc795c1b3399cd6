"""Application configuration and .env loading."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_UPLOAD_CHUNK_SIZE = 32 * 1024 * 1024


class Settings(BaseSettings):
    """Centralized runtime configuration."""

    cache_dir: Path = Field(
        default=Path(".uuidcache/store"), validation_alias="UUIDCACHE_DIR"
    )
    state_file: Path = Field(
        default=Path(".uuidcache/state"), validation_alias="UUIDCACHE_STATE_FILE"
    )
    workspace: Path | None = Field(default=None, validation_alias="GITHUB_WORKSPACE")
    server_url: str = Field(
        default="https://github.com", validation_alias="GITHUB_SERVER_URL"
    )
    upload_chunk_size: int = Field(
        default=DEFAULT_UPLOAD_CHUNK_SIZE,
        gt=0,
        validation_alias="UUIDCACHE_UPLOAD_CHUNK_SIZE",
    )
    log_level: str = Field(default="INFO", validation_alias="UUIDCACHE_LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def resolved_workspace(self) -> Path:
        """Directory that relative cache paths are resolved against."""
        return (self.workspace or Path.cwd()).resolve()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once from .env/environment."""
    return Settings()


__all__ = ["DEFAULT_UPLOAD_CHUNK_SIZE", "Settings", "get_settings"]
