"""
Application settings and configuration management.

This module centralizes the group directory configuration using Pydantic
settings for type validation and environment variable handling.
"""

from pydantic import Field
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Main group directory settings class.

    Uses Pydantic BaseSettings to automatically load configuration from:
    1. Environment variables
    2. .env file
    3. Default values defined here
    """

    # Database Configuration
    database_url: str = "sqlite:///./group_directory.db"

    # Cache Configuration
    # "memory" keeps a per-process cache, "redis" shares it between workers
    cache_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: Optional[int] = None
    cache_key_prefix: str = "group_directory:group:"

    # Directory Configuration
    batch_chunk_size: int = Field(1000, ge=1, le=1000)  # Ids per IN (...) list
    gid_max_bytes: int = Field(64, ge=1, le=64)  # Width of the gid column

    # Application Configuration
    debug: bool = False
    log_level: str = "INFO"

    # API Configuration
    api_v1_str: str = "/api/v1"
    project_name: str = "Group Directory"

    class Config:
        """Pydantic configuration for settings loading."""
        env_file = ".env"
        case_sensitive = False


# Global settings instance
# This will be imported throughout the application for configuration access
settings = Settings()
