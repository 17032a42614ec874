"""
Application settings using Pydantic.

Provides environment-based configuration loading with STACKPLAN_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STACKPLAN_",
    )

    # External binary (falls back to "terragrunt" when empty)
    terragrunt_binary: str = ""

    # Seconds before an external command is killed; None waits forever
    command_timeout: float | None = None

    # Logging
    log_level: str = "WARNING"

    # Terminal UX
    show_spinners: bool = True

    # Terraform Cloud / Enterprise credentials for the generated CLI config file
    terraform_cloud_host: str = "app.terraform.io"
    terraform_cloud_token: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
