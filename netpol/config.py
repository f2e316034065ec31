"""
Configuration management for netpol.

This module uses Pydantic's BaseSettings to manage configuration
through environment variables (prefix NETPOL_) and an optional .env file.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    These settings are loaded from environment variables.
    """

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # text | json

    # Rendering
    YAML_INDENT: int = 2
    POLICY_NAME_PREFIX: str = "netpol-"

    # Validation
    STRICT_VALIDATION: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        env_prefix="NETPOL_",
        extra="ignore",
    )


settings = Settings()


def get_settings() -> Settings:
    return settings
