"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files.
Validates fields and provides typed access to settings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from urlcache import fetcher
from urlcache.store import DEFAULT_FILE_MODE, HttpCache


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Optional:
        CACHE_DIR: Root directory of the URL cache
        FILE_MODE: Permission bits for cached files (octal string or int)
        LOG_LEVEL: Logging level
        LOG_FILE: JSON lines log file
        USER_AGENT: User-Agent header sent by the fetcher
        REQUEST_TIMEOUT: Fetcher request timeout in seconds
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cache
    CACHE_DIR: Path = Field(default=Path(".cache/urlcache"), description="Cache directory")
    FILE_MODE: int = Field(
        default=DEFAULT_FILE_MODE, description="Permission bits for cached files"
    )

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    LOG_FILE: Path | None = Field(default=None, description="JSON lines log file")

    # Fetcher
    USER_AGENT: str = Field(
        default=fetcher.USER_AGENT,
        description="User-Agent header for network fetches",
    )
    REQUEST_TIMEOUT: float = Field(
        default=fetcher.REQUEST_TIMEOUT, gt=0.0, description="Request timeout in seconds"
    )

    @field_validator("FILE_MODE", mode="before")
    @classmethod
    def parse_file_mode(cls, v: object) -> object:
        """Accept octal strings such as "644" or "0o644" from the environment."""
        if isinstance(v, str):
            text = v.strip().lower().removeprefix("0o")
            try:
                return int(text, 8)
            except ValueError as e:
                raise ValueError(f"FILE_MODE must be an octal number, got {v!r}") from e
        return v

    @field_validator("FILE_MODE")
    @classmethod
    def validate_file_mode(cls, v: int) -> int:
        """Cached files are plain data: permission bits only, never executable."""
        if not 0 <= v <= 0o777:
            raise ValueError(f"FILE_MODE must be between 0 and 0o777, got {oct(v)}")
        if v & 0o111:
            raise ValueError(f"FILE_MODE must not set execute bits, got {oct(v)}")
        if v & 0o600 != 0o600:
            raise ValueError(f"FILE_MODE must let the owner read and write, got {oct(v)}")
        return v

    def create_cache(self) -> HttpCache:
        """Build an HttpCache rooted at CACHE_DIR."""
        return HttpCache(self.CACHE_DIR, file_mode=self.FILE_MODE)

    def create_fetcher(self) -> fetcher.ResourceFetcher:
        """Build a ResourceFetcher over a cache from create_cache()."""
        return fetcher.ResourceFetcher(
            self.create_cache(),
            timeout=self.REQUEST_TIMEOUT,
            user_agent=self.USER_AGENT,
        )

    def display_dict(self) -> dict[str, str | int | float | None]:
        """Return settings for display."""
        return {
            "CACHE_DIR": str(self.CACHE_DIR),
            "FILE_MODE": oct(self.FILE_MODE),
            "LOG_LEVEL": self.LOG_LEVEL,
            "LOG_FILE": str(self.LOG_FILE) if self.LOG_FILE else None,
            "USER_AGENT": self.USER_AGENT,
            "REQUEST_TIMEOUT": self.REQUEST_TIMEOUT,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
