"""Application configuration."""

from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LikeCountSource(str, Enum):
    """Which system owns the like count written into bottle snapshots.

    SNAPSHOT: the tracker's like count is copied into every new snapshot.
    LEDGER: likes live only in the ledger's event history; snapshots keep
    whatever like count they were created with.
    """

    SNAPSHOT = "snapshot"
    LEDGER = "ledger"


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables will be loaded and validated using Pydantic.
    """

    app_name: str = "bottle-sync"
    version: str = "0.1.0"

    # Content Store Settings
    CONTENT_GATEWAY_URL: str = "https://storacha.link/ipfs"
    CONTENT_API_URL: str = "http://127.0.0.1:5001"
    CONTENT_API_TOKEN: str | None = None
    CONTENT_TIMEOUT: float = Field(default=30.0, gt=0)
    CONTENT_CACHE_TTL_MS: int = Field(default=5 * 60 * 1000, gt=0)

    # Promotion Settings
    PROMOTION_LIKES_THRESHOLD: int = Field(default=100, gt=0)
    PROMOTION_COMMENTS_THRESHOLD: int = Field(default=4, ge=0)

    # Count Sync Settings
    LIKE_COUNT_SOURCE: LikeCountSource = LikeCountSource.SNAPSHOT

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("CONTENT_GATEWAY_URL", "CONTENT_API_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs so paths can be appended with a single slash."""
        if not v or v.isspace():
            raise ValueError("URL cannot be empty")
        return v.rstrip("/")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        if v.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()
