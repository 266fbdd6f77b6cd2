from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FORTNITE_API_BASE_URL = "https://fortnite-api.com/"


class Settings(BaseSettings):
    fortnite_api_key: str = Field(default="", validation_alias="FORTNITE_API_KEY")
    fortnite_api_base_url: str = Field(
        default=DEFAULT_FORTNITE_API_BASE_URL,
        validation_alias="FORTNITE_API_BASE_URL",
    )
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-3.5-turbo", validation_alias="OPENAI_MODEL")
    http_timeout_seconds: float = Field(default=15.0, validation_alias="HTTP_TIMEOUT_SECONDS")
    llm_timeout_seconds: float = Field(default=30.0, validation_alias="LLM_TIMEOUT_SECONDS")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("fortnite_api_key", "openai_api_key")
    @classmethod
    def validate_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError(
                "FORTNITE_API_KEY and OPENAI_API_KEY environment variables are required. "
                "Set them in .env file or environment variables."
            )
        return value

    @field_validator("fortnite_api_base_url")
    @classmethod
    def normalize_base_url(cls, value: str) -> str:
        return (value or DEFAULT_FORTNITE_API_BASE_URL).rstrip("/") + "/"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process.

    Raises:
        pydantic.ValidationError: If a required API key is missing
    """
    return Settings()
