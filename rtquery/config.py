"""
Configuration settings for rtquery.

Uses Pydantic Settings to load environment variables for logging, the saved
query file location, the in-memory and on-disk buffer limits and the names
of the log event fields that real-time filters inspect.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Saved queries
    queries_file: str = Field("queries.json", alias="QUERIES_FILE")

    # Buffering (-1 disables the capacity check)
    queue_capacity_bytes: int = Field(100 * 1024 * 1024, alias="QUEUE_CAPACITY_BYTES")

    # Disk buffering (used when a queue directory is set; -1 threshold disables the check)
    queue_dir: Optional[str] = Field(None, alias="QUEUE_DIR")
    fs_percent_threshold: int = Field(98, alias="FS_PERCENT_THRESHOLD")
    queue_gc_interval_seconds: float = Field(30.0, alias="QUEUE_GC_INTERVAL_SECONDS")

    # Log event field names
    log_message_field: str = Field("message", alias="LOG_MESSAGE_FIELD")
    log_hostname_field: str = Field("hostname", alias="LOG_HOSTNAME_FIELD")
    log_tags_field: str = Field("tags", alias="LOG_TAGS_FIELD")
    log_timestamp_field: str = Field("@timestamp", alias="LOG_TIMESTAMP_FIELD")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
