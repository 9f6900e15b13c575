"""Configuration and settings for the PR assistant."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # GitHub
    github_token: str | None = None
    github_webhook_secret: str | None = None

    # OpenRouter (OpenAI-compatible chat completions)
    openrouter_api_key: str | None = None
    openrouter_model: str = "deepseek/deepseek-chat-v3-0324:free"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_app_name: str = "GitHub PR Assistant"
    openrouter_app_url: str = "https://github-pr-assistant.local"

    # Analysis limits
    max_files_to_analyze: int = 15
    max_diff_chars_per_file: int = 3000

    # Runtime
    environment: str = "development"
    api_prefix: str = ""
    logfire_token: str | None = None

    # Server config
    host: str = "0.0.0.0"
    port: int = 3000

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
