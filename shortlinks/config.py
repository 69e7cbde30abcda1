"""Configuration management for the short link service."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    """Application configuration."""

    # Link defaults
    short_code_length: int = Field(
        default=6,
        ge=1,
        description="Length of generated short codes"
    )

    default_ttl_seconds: int = Field(
        default=0,
        ge=0,
        description="TTL applied when none is given (0 = unbounded)"
    )

    default_max_clicks: int = Field(
        default=0,
        ge=0,
        description="Click budget applied when none is given (0 = unbounded)"
    )

    max_collision_retries: int = Field(
        default=50,
        ge=1,
        description="Attempts at finding an unused short code"
    )

    # Storage settings
    data_file: str = Field(
        default="./data.json",
        description="Path of the JSON data file"
    )

    reaper_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Seconds between background sweeps for expired links"
    )

    # Server settings
    host: str = Field(
        default="127.0.0.1",
        description="Host to bind to"
    )

    port: int = Field(
        default=9200,
        description="Port to listen on"
    )

    base_url: str = Field(
        default="http://localhost:9200",
        description="Base URL for generating short URLs"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }


def load_config(**overrides) -> Config:
    """Load configuration from environment, with explicit overrides."""
    return Config(**overrides)
