"""
Configuration settings for the CORS relay.
Loaded once at startup and handed to the handler explicitly.
"""
from typing import Optional
from urllib.parse import urlsplit

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Relay settings loaded from RELAY_* environment variables."""

    # Listener
    listen_host: str = "0.0.0.0"
    listen_port: int = 8080

    # Upstream
    upstream_base_url: str = "https://api.groq.com"
    upstream_timeout: Optional[float] = None  # None: wait as long as upstream takes
    chunk_size: int = 65536

    # Logging. log_requests switches the per-request line on or off on its own;
    # log_level applies to everything else.
    log_requests: bool = True
    log_level: str = "INFO"

    @field_validator("upstream_base_url")
    @classmethod
    def _check_upstream(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"upstream_base_url must be an absolute http(s) URL, got {value!r}")
        return value.rstrip("/")

    @field_validator("listen_port")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"listen_port out of range: {value}")
        return value

    @field_validator("chunk_size")
    @classmethod
    def _check_chunk_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("chunk_size must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.upper()

    class Config:
        env_prefix = "RELAY_"
        env_file = ".env"
        extra = "ignore"
        frozen = True
