"""Configuration system for cico-bot."""

from .loader import default_db_path, get_config_path, load_config
from .schema import (
    CicoBotConfig,
    ExportConfig,
    ImageConfig,
    LoggingConfig,
    PortalConfig,
    StorageConfig,
    TelegramConfig,
)

__all__ = [
    "CicoBotConfig",
    "TelegramConfig",
    "PortalConfig",
    "ExportConfig",
    "ImageConfig",
    "StorageConfig",
    "LoggingConfig",
    "load_config",
    "get_config_path",
    "default_db_path",
]
