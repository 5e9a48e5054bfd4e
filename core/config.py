"""
Centralized configuration management.
All environment variables and settings are defined here.
"""
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = Field(default="Quick Note Ingest Service", alias="APP_NAME")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000)
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_allow_origins: List[str] = Field(default=["*"], alias="CORS_ALLOW_ORIGINS")

    # Extraction provider
    extraction_provider_url: str = Field(..., alias="EXTRACTION_PROVIDER_URL")
    provider_api_key: Optional[str] = Field(default=None, alias="PROVIDER_API_KEY")
    provider_timeout: float = Field(default=45.0, alias="PROVIDER_TIMEOUT")
    provider_verify_ssl: bool = Field(default=True, alias="PROVIDER_VERIFY_SSL")

    # Identity provider (Supabase Auth)
    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_anon_key: str = Field(..., alias="SUPABASE_ANON_KEY")
    identity_timeout: float = Field(default=10.0, alias="IDENTITY_TIMEOUT")

    # Normalization
    default_category_label: str = Field(default="Khác", alias="DEFAULT_CATEGORY_LABEL")
    fuzzy_match_threshold: float = Field(default=0.85, alias="FUZZY_MATCH_THRESHOLD")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v_upper

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        """Validate port is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("provider_timeout", "identity_timeout")
    @classmethod
    def validate_timeout(cls, v):
        """Timeouts must be positive."""
        if v <= 0:
            raise ValueError("Timeout must be greater than zero")
        return v

    @field_validator("fuzzy_match_threshold")
    @classmethod
    def validate_threshold(cls, v):
        """Validate similarity threshold is a ratio."""
        if not (0.0 <= v <= 1.0):
            raise ValueError("Fuzzy match threshold must be between 0 and 1")
        return v

    @field_validator("supabase_url", "extraction_provider_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
