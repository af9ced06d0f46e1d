"""
Runtime configuration for the collaborative post service.

Values come from the process environment first and fall back to the ``.env``
file in the project root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]

ENV_PATH = BASE_DIR / ".env"

# Platform-provided variables win over .env defaults
load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")

    app_name: str = Field(default="Collab Feed", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # Identity
    jwt_secret_key: str | None = Field(default=None, alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")

    # Media store (DigitalOcean Spaces)
    spaces_key: str | None = Field(default=None, alias="DO_SPACES_KEY")
    spaces_secret: str | None = Field(default=None, alias="DO_SPACES_SECRET")
    spaces_region: str | None = Field(default=None, alias="DO_SPACES_REGION")
    spaces_bucket: str | None = Field(default=None, alias="DO_SPACES_NAME")
    spaces_endpoint: str | None = Field(default=None, alias="DO_SPACES_ENDPOINT")
    media_folder: str = Field(default="posts", alias="MEDIA_FOLDER")

    # Feed and engagement limits
    feed_default_page_size: int = Field(default=20, alias="FEED_DEFAULT_PAGE_SIZE")
    feed_max_page_size: int = Field(default=100, alias="FEED_MAX_PAGE_SIZE")
    feed_max_windows: int = Field(default=10, alias="FEED_MAX_WINDOWS")
    media_max_image_bytes: int = Field(default=5 * 1024 * 1024, alias="MEDIA_MAX_IMAGE_BYTES")
    media_max_video_bytes: int = Field(default=50 * 1024 * 1024, alias="MEDIA_MAX_VIDEO_BYTES")
    comment_max_length: int = Field(default=500, alias="COMMENT_MAX_LENGTH")
    share_default_body: str = Field(default="Shared a post", alias="SHARE_DEFAULT_BODY")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        return origins or ["*"]


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
