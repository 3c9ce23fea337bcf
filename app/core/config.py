from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, HttpUrl, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.constants import Environment, StorageProvider

MEGABYTE = 1024 * 1024


class SupabaseSettings(BaseModel):
    URL: HttpUrl | None = None
    KEY: SecretStr | None = None
    BUCKET: str = "chat-media"
    # Seconds, sent as `cache-control: max-age=<value>`
    CACHE_CONTROL: int = 3600


class MediaSettings(BaseModel):
    """
    Limits and allow-lists for chat media attachments.
    """

    MAX_FILE_SIZE: int = Field(default=50 * MEGABYTE, gt=0)

    IMAGE_TYPES: list[str] = [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    ]
    VIDEO_TYPES: list[str] = ["video/mp4", "video/webm", "video/ogg"]
    AUDIO_TYPES: list[str] = [
        "audio/mpeg",
        "audio/wav",
        "audio/ogg",
        "audio/mp4",
    ]
    DOCUMENT_TYPES: list[str] = [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "text/plain",
        "application/zip",
        "application/x-rar-compressed",
    ]

    # Video thumbnails
    THUMBNAIL_OFFSET_SECONDS: float = Field(default=1.0, ge=0.0)
    THUMBNAIL_QUALITY: int = Field(default=80, ge=1, le=95)
    FFMPEG_BINARY: str = "ffmpeg"

    # Extra attempts for the storage write only. 0 keeps every failure terminal.
    UPLOAD_RETRIES: int = Field(default=0, ge=0, le=5)
    UPLOAD_TIMEOUT_SECONDS: float | None = Field(default=None, gt=0)


class Settings(BaseSettings):
    """
    Handles config and settings for the chat media service.
    Fetches the config from environment variables and .env file
    """

    # Base URL for the application
    BASE_URL: HttpUrl = "http://localhost:8000"

    # the endpoint for api docs and all endpoints
    API_URL: str = "/api"

    # Enables or disables debug mode
    DEBUG: bool = False

    # The current environment
    ENVIRONMENT: Environment = Environment.LOCAL

    # List of allowed CORS origins
    ALLOWED_CORS_ORIGINS: list[HttpUrl] = []

    # Sentry Configuration
    SENTRY_DSN: HttpUrl | None = None

    # File Storage
    STORAGE_PROVIDER: StorageProvider = StorageProvider.LOCAL
    FILE_STORAGE_PATH: Path = Path("/uploads")
    SUPABASE: SupabaseSettings = Field(default_factory=SupabaseSettings)

    # Attachments
    MEDIA: MediaSettings = Field(default_factory=MediaSettings)

    # Logfire
    LOGFIRE_TOKEN: SecretStr | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=True,
        extra="allow",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Retrieves and caches the application settings.
    """
    return Settings()

