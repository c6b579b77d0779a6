"""
Configuration module for the GitHub agent client.

Loads environment variables and provides centralized settings.
All secrets and configuration are managed through environment variables.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Secrets are loaded from environment or .env file.
    Never commit secrets to version control.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    ENVIRONMENT: str = Field(default="development")
    PORT: int = Field(default=3000)

    # GitHub App Configuration
    GITHUB_APP_ID: str = Field(...)
    GITHUB_APP_KEY: Optional[str] = Field(
        default=None,
        description="Path to the GitHub App private key (PEM file)",
    )
    GITHUB_PRIVATE_KEY: Optional[str] = Field(
        default=None,
        description="Inline GitHub App private key, used when GITHUB_APP_KEY is unset",
    )
    GITHUB_WEBHOOK_SECRET: str = Field(...)
    GITHUB_API_URL: str = Field(default="https://api.github.com")
    GITHUB_TIMEOUT_SECONDS: float = Field(default=30.0)

    # LLM Configuration
    LLM_PROVIDER: str = Field(default="anthropic")
    ANTHROPIC_API_KEY: str = Field(default="")
    OPENAI_API_KEY: str = Field(default="")
    LLM_MODEL_SMALL: str = Field(default="claude-3-5-haiku-latest")
    LLM_MODEL: str = Field(default="claude-sonnet-4-20250514")
    LLM_MODEL_LARGE: str = Field(default="claude-opus-4-20250514")
    LLM_MAX_TOKENS: int = Field(default=4096)
    LLM_TEMPERATURE: float = Field(default=0.3)

    # Agent character
    AGENT_NAME: str = Field(default="Eliza")
    AGENT_BIO: str = Field(
        default="An experienced open-source product manager who triages incoming issues."
    )
    AGENT_LORE: str = Field(default="")
    AGENT_CHARACTER_FILE: Optional[str] = Field(default=None)

    # Observability
    LOG_LEVEL: str = Field(default="INFO")

    @field_validator("GITHUB_PRIVATE_KEY", mode="before")
    @classmethod
    def parse_private_key(cls, v):
        """Replace literal \\n sequences in an inline key with newlines."""
        if v and "\\n" in v:
            return v.replace("\\n", "\n")
        return v

    def read_private_key(self) -> str:
        """
        Resolve the GitHub App private key.

        The key file named by GITHUB_APP_KEY wins over GITHUB_PRIVATE_KEY.

        Returns:
            str: PEM-encoded private key

        Raises:
            ValueError: If neither source is configured
        """
        if self.GITHUB_APP_KEY:
            return Path(self.GITHUB_APP_KEY).read_text(encoding="utf-8")
        if self.GITHUB_PRIVATE_KEY:
            return self.GITHUB_PRIVATE_KEY
        raise ValueError("GITHUB_APP_KEY or GITHUB_PRIVATE_KEY must be configured")


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, with optional explicit overrides."""
    return Settings(**overrides)
