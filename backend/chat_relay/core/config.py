"""Application configuration and settings management."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CHAT_RELAY_",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="Chat Relay API", description="Human readable application name.")
    environment: Literal["local", "development", "staging", "production"] = Field(
        default="local",
        description="Deployment environment name.",
    )
    log_level: Optional[str] = Field(
        default=None,
        description="Explicit log level; derived from the environment when unset.",
    )
    openai_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("CHAT_RELAY_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="Credential for the upstream chat-completions API.",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI-compatible API.",
    )
    chat_model: str = Field(default="gpt-4o", description="Model used for the chat endpoint.")
    request_timeout: float = Field(default=60.0, gt=0, description="Upstream timeout in seconds.")
    max_message_length: int = Field(default=500, ge=1, description="Maximum characters in one message.")
    max_messages: int = Field(default=50, ge=1, description="Maximum messages in one conversation.")
    api_key_prefix: str = Field(default="sk-", description="Expected prefix of the API key.")
    api_key_min_length: int = Field(default=20, ge=1, description="Minimum length of the API key.")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins.")

    def api_key_value(self) -> Optional[str]:
        """Return the raw API key or ``None`` when it is not configured."""

        if self.openai_api_key is None:
            return None
        return self.openai_api_key.get_secret_value()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
