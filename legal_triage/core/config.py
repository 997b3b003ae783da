"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application environment
    env: Literal["dev", "test", "staging", "prod"] = "dev"

    # Logging
    log_level: str = "INFO"

    # Triage configuration document
    triage_config_path: str = "data/triage-config.json"
    triage_seed_on_startup: bool = True

    # Prompt content
    organization_name: str = "Acme Corp"
    fallback_email: str = "legal@acme.corp"

    # LLM (any OpenAI-compatible chat completions endpoint)
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 1000
    openai_timeout_seconds: float = 60.0

    # CORS (development only)
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    @property
    def is_dev(self) -> bool:
        """Check if running in development mode."""
        return self.env == "dev"

    @property
    def is_prod(self) -> bool:
        """Check if running in production mode."""
        return self.env == "prod"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
