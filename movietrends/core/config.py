"""Configuration management for movietrends."""

from datetime import timedelta
from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse

from pydantic import PositiveInt, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # TMDB
    tmdb_bearer_token: SecretStr
    tmdb_api_base_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p/w500"
    imdb_base_url: str = "https://www.imdb.com/title/"

    # Network settings
    request_timeout: PositiveInt = 30  # Seconds per TMDB request
    # Proxy configuration in the format http://host:port or socks5://host:port
    proxy: str | None = None

    # Trending data is considered stale after this long.
    # Not enforced by TMDBMovieRepository.is_trending_stale().
    trending_movies_ttl: timedelta = timedelta(minutes=10)

    # How long the HTTP surface waits for a view model to leave Loading
    state_wait_timeout: PositiveInt = 30

    # App settings
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @field_validator("tmdb_api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("proxy")
    @classmethod
    def validate_proxy(cls, v: str | None) -> str | None:
        if v is None:
            return v

        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https", "socks4", "socks5", "socks5h"):
            raise ValueError(
                "Proxy must be a valid URL with scheme http/https/socks4/socks5/socks5h"
            )
        if not parsed.netloc:
            raise ValueError("Proxy must have a host and port")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
