# cico_bot/config/schema.py
"""
Pydantic configuration models for cico-bot.

All models use extra="ignore" to allow unknown YAML keys without crashing.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class TelegramConfig(BaseModel):
    """Bot API connection settings."""

    model_config = ConfigDict(extra="ignore")

    bot_token: str | None = Field(
        default=None, description="Bot token (BOT_TOKEN env var overrides)"
    )
    request_timeout: float = Field(
        default=15.0, gt=0.0, description="Per-request timeout in seconds"
    )


class PortalConfig(BaseModel):
    """Attendance portal API settings."""

    model_config = ConfigDict(extra="ignore")

    base_url: str | None = Field(
        default=None, description="Portal API base URL (BASE_URL env var overrides)"
    )
    timeout: float = Field(default=15.0, gt=0.0, description="Request timeout in seconds")


class ExportConfig(BaseModel):
    """Bulk export pacing and retry settings."""

    model_config = ConfigDict(extra="ignore")

    progress_every: int = Field(
        default=5, ge=1, description="Push a progress update every N completed records"
    )
    inter_record_delay: float = Field(
        default=1.0, ge=0.0, description="Seconds to wait between records"
    )
    max_send_attempts: int = Field(
        default=3, ge=1, le=10, description="Total attempts per payload when throttled"
    )
    throttle_padding: float = Field(
        default=1.0, ge=0.0, description="Seconds added to the provider's retry-after"
    )
    default_retry_after: float = Field(
        default=10.0, ge=0.0, description="Wait used when the provider omits retry-after"
    )
    batch_size: int = Field(
        default=10, ge=1, description="Records sent by the 'last reports' action"
    )
    bulk_record_limit: int = Field(
        default=9999, ge=1, description="Record limit requested for a full export"
    )


class ImageConfig(BaseModel):
    """Image download and stretch settings."""

    model_config = ConfigDict(extra="ignore")

    stretch_factor: float = Field(
        default=2.0, gt=0.0, description="Vertical scale applied when stretching"
    )
    download_timeout: float = Field(
        default=15.0, gt=0.0, description="Image download timeout in seconds"
    )


class StorageConfig(BaseModel):
    """User settings persistence."""

    model_config = ConfigDict(extra="ignore")

    db_path: str | None = Field(
        default=None,
        description="SQLite file for user settings (None = user config dir)",
    )


class LoggingConfig(BaseModel):
    """Log output settings."""

    model_config = ConfigDict(extra="ignore")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    json_output: bool = Field(default=False, description="Emit one JSON object per line")


class CicoBotConfig(BaseModel):
    """Root configuration for cico-bot."""

    model_config = ConfigDict(extra="ignore")

    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    portal: PortalConfig = Field(default_factory=PortalConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    images: ImageConfig = Field(default_factory=ImageConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
