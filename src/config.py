"""Application configuration using pydantic-settings."""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"

    # Text drawing
    font_name: str = "helv"
    font_size: float = Field(default=12, gt=0)

    # Field placement (points)
    text_padding: float = 2
    text_inset: float = 12

    # Baseline step between lines, wrapped or listed (points)
    line_height: float = Field(default=14, gt=0)

    # Fallback list layout (points)
    fallback_top_margin: float = 20
    fallback_left_margin: float = 10

    # Decoded template size limit in bytes, 0 disables the check
    max_template_bytes: int = Field(default=0, ge=0)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
