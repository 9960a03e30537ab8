"""
Shared configuration management for the Jokes service.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias="JOKES_ENV")
    log_level: str = Field(default="info", validation_alias="JOKES_LOG_LEVEL")

    # Backing store
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: str = Field(default="", validation_alias="DB_PASSWORD")
    db_name: str = Field(default="jokes", validation_alias="DB_NAME")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_acquire_timeout: Optional[float] = Field(default=None, validation_alias="DB_ACQUIRE_TIMEOUT")
    db_command_timeout: Optional[float] = Field(default=None, validation_alias="DB_COMMAND_TIMEOUT")

    # Cache
    cache_duration_seconds: float = Field(default=300, validation_alias="JOKES_CACHE_DURATION_SECONDS")
    single_flight: bool = Field(default=False, validation_alias="JOKES_SINGLE_FLIGHT")

    # Front-end plumbing
    static_dir: str = Field(default="frontend/dist", validation_alias="JOKES_STATIC_DIR")
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        validation_alias="JOKES_CORS_ORIGINS",
    )


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=4000, validation_alias="PORT")


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, **overrides)
