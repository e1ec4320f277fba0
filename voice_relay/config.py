"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly typed application configuration."""

    completion_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GROQ_API_KEY", "COMPLETION_API_KEY"),
    )
    completion_endpoint: str = Field(
        default="https://api.groq.com/openai/v1/chat/completions",
        alias="COMPLETION_ENDPOINT",
    )
    completion_model: str = Field(default="llama-3.1-8b-instant", alias="COMPLETION_MODEL")
    completion_max_tokens: int = Field(default=150, alias="COMPLETION_MAX_TOKENS")
    completion_temperature: float = Field(default=0.7, alias="COMPLETION_TEMPERATURE")
    completion_timeout: float = Field(default=10.0, alias="COMPLETION_TIMEOUT")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", alias="LOG_LEVEL"
    )
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3002, alias="PORT")
    static_dir: str | None = Field(default=None, alias="STATIC_DIR")
    ws_inactivity_timeout: float | None = Field(
        default=None, alias="WS_INACTIVITY_TIMEOUT", description="Seconds"
    )
    serialize_transcriptions: bool = Field(default=True, alias="SERIALIZE_TRANSCRIPTIONS")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("completion_api_key", "static_dir", mode="before")
    @classmethod
    def _blank_as_none(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def remote_enabled(self) -> bool:
        """Whether a completion credential is configured."""

        return self.completion_api_key is not None


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of settings."""

    return Settings()
