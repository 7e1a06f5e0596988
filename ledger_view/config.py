"""
Configuration management using Pydantic Settings.
All parameters are loaded from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_env: str = Field(default="development")
    app_log_level: str = Field(default="INFO")
    app_log_json: bool = Field(default=False)

    # Statements API
    statements_api_url: str = Field(default="http://localhost:5000")
    statements_api_timeout_seconds: float = Field(default=30.0)
    statements_api_token: Optional[str] = Field(default=None)

    # Ledger view
    default_page_size: int = Field(default=50, ge=1)
    default_tenant_id: Optional[str] = Field(default=None)

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
