"""Configuration management for the test session client."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionSettings(BaseSettings):
    """Client settings loaded from ``PROFTEST_``-prefixed environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PROFTEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API
    api_base_url: str = "http://localhost:8000/v1"
    access_token: Optional[str] = None
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    # Local session store; in-memory when unset
    store_path: Optional[str] = None
