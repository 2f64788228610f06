"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TITLE_FORMAT = "{{show}} {{tour}} | ({{date}}) {{master}}"
DEFAULT_DATE_REPLACE_CHAR = "x"


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="Encora Movie Provider", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    encora_api_key: str | None = Field(default=None, alias="ENCORA_API_KEY")
    stagemedia_api_key: str | None = Field(default=None, alias="STAGEMEDIA_API_KEY")

    encora_api_url: HttpUrl = Field(
        default="https://encora.it/api", alias="ENCORA_API_URL"
    )
    stagemedia_api_url: HttpUrl = Field(
        default="https://stagemedia.me/api", alias="STAGEMEDIA_API_URL"
    )
    http_timeout_seconds: float = Field(
        default=20.0, alias="HTTP_TIMEOUT", gt=0, le=300
    )

    title_format: str = Field(default=DEFAULT_TITLE_FORMAT, alias="TITLE_FORMAT")
    date_replace_char: str = Field(
        default=DEFAULT_DATE_REPLACE_CHAR, alias="DATE_REPLACE_CHAR"
    )

    nfo_library_path: str = Field(default=".", alias="NFO_LIBRARY_PATH")
    nfo_match_fallback: bool = Field(default=False, alias="NFO_MATCH_FALLBACK")

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("title_format", mode="before")
    @classmethod
    def _default_blank_title_format(cls, value: object) -> object:
        """Treat an empty template the same as an unset one."""

        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_TITLE_FORMAT
        return value

    @field_validator("date_replace_char", mode="before")
    @classmethod
    def _validate_replace_char(cls, value: object) -> str:
        if value is None or value == "":
            return DEFAULT_DATE_REPLACE_CHAR
        text = str(value)
        if len(text) != 1:
            raise ValueError("DATE_REPLACE_CHAR must be a single character")
        return text

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> str:
        return str(value or "INFO").strip().upper()

    def missing_credentials(self) -> list[str]:
        """Return the names of required API keys that are not configured."""

        missing: list[str] = []
        if not self.encora_api_key:
            missing.append("ENCORA_API_KEY")
        if not self.stagemedia_api_key:
            missing.append("STAGEMEDIA_API_KEY")
        return missing

    def require_credentials(self) -> None:
        """Raise when the upstream API keys needed at startup are absent."""

        missing = self.missing_credentials()
        if missing:
            details = "\n".join(f"  - {name} is not set" for name in missing)
            raise RuntimeError(f"Configuration validation failed:\n{details}")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
