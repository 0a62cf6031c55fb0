"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Iterable, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="Bhojpuri Raas", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=7000, alias="PORT")
    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    base_url: str = Field(default="https://bhojpuriraas.net", alias="BASE_URL")
    logo_url: str = Field(
        default="https://bhojpuriraas.net/images/BhojpuriRaas.Net_w.png",
        alias="LOGO_URL",
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, alias="USER_AGENT")
    request_timeout: float = Field(default=20.0, alias="REQUEST_TIMEOUT", gt=0)

    fetch_retries: int = Field(default=3, alias="FETCH_RETRIES", ge=1, le=10)
    fetch_retry_backoff: float = Field(
        default=0.5, alias="FETCH_RETRY_BACKOFF", ge=0
    )
    max_listing_pages: int = Field(
        default=8, alias="MAX_LISTING_PAGES", ge=1, le=50
    )

    file_host_marker: str = Field(default="easyupload.io", alias="FILE_HOST_MARKER")
    file_host_api_url: str = Field(
        default="https://eu4.easyupload.io/action.php", alias="FILE_HOST_API_URL"
    )
    file_host_origin: str = Field(
        default="https://easyupload.io", alias="FILE_HOST_ORIGIN"
    )
    file_host_captcha_token: str = Field(
        default="gZx5mn2DRr4wxy2Bvj5FbjtWkZaTeWFC",
        alias="FILE_HOST_CAPTCHA_TOKEN",
    )
    media_extensions: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(".mp4",), alias="MEDIA_EXTENSIONS"
    )

    @field_validator("base_url", "file_host_origin", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        normalized = value.strip().rstrip("/")
        if not normalized.startswith(("http://", "https://")):
            raise ValueError("URL settings must be absolute HTTP(S) URLs")
        return normalized

    @field_validator("log_level", mode="after")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @field_validator("media_extensions", mode="before")
    @classmethod
    def _parse_media_extensions(cls, value: object) -> tuple[str, ...]:
        """Accept comma separated extension lists from environment values."""

        if value is None:
            return (".mp4",)
        if isinstance(value, str):
            raw_values = [part.strip() for part in value.split(",")]
        elif isinstance(value, Iterable):
            raw_values = [str(part).strip() for part in value]
        else:
            raise TypeError("MEDIA_EXTENSIONS must be a string or iterable of strings")

        cleaned: list[str] = []
        for entry in raw_values:
            if not entry:
                continue
            extension = entry.lower()
            if not extension.startswith("."):
                extension = f".{extension}"
            if extension not in cleaned:
                cleaned.append(extension)
        if not cleaned:
            return (".mp4",)
        return tuple(cleaned)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
