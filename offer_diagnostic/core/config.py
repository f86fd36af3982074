"""Configuration management for the offer diagnostic service."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    OFFER_DIAGNOSTIC_ENV: str = Field(
        default="dev", description="Environment: dev, staging, prod, test"
    )

    # Recommendation output
    DIAGNOSTIC_TOP_K: int = Field(
        default=3, ge=1, le=5, description="Default number of recommendations returned"
    )

    # Optional phrasing chain (Anthropic)
    ANTHROPIC_API_KEY: str | None = Field(
        default=None, description="Anthropic API key, only needed for phrased recommendations"
    )
    PHRASING_MODEL: str = Field(
        default="claude-haiku-4-5-20251001", description="Model for recommendation phrasing"
    )
    PHRASING_MAX_TOKENS: int = Field(
        default=1500, description="Max output tokens for recommendation phrasing"
    )
    PHRASING_TIMEOUT_SECONDS: float = Field(
        default=30.0, description="Per-request timeout for the phrasing call"
    )
    PHRASING_PROMPT_VERSION: str = Field(
        default="phrasing_v1", description="Phrasing prompt version for tracking"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If environment variables fail validation
    """
    return Settings()
