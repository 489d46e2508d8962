"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Missing required values (Supabase credentials, Anthropic API key) fail
at startup with a ValidationError.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # TEXT GENERATION
    # ===================
    anthropic_api_key: str = Field(
        ...,
        min_length=1,
        description="Anthropic API key used by the description enhancer"
    )
    anthropic_model: str = Field(
        default="claude-3-5-haiku-latest",
        description="Model used to rewrite product descriptions"
    )
    enhance_descriptions: bool = Field(
        default=True,
        description="Call the text-generation service for each imported row"
    )
    enhancer_requests_per_minute: int = Field(
        default=60,
        ge=1,
        le=10000,
        description="Token bucket size and refill rate for enhancer calls"
    )

    # ===================
    # PRODUCT IMPORT
    # ===================
    csv_file_path: str = Field(
        default="data/images40.txt",
        description="Path of the tab-separated product feed"
    )
    delete_flag: bool = Field(
        default=False,
        description="Flag products missing from the feed as deleted"
    )
    import_batch_size: int = Field(
        default=1000,
        ge=1,
        le=10000,
        description="Products per bulk upsert"
    )
    import_schedule_enabled: bool = Field(
        default=True,
        description="Run the import on the cron schedule"
    )
    import_cron: str = Field(
        default="0 0 * * *",
        description="Crontab expression for the scheduled import (daily at midnight)"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
