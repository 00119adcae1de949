# cico_bot/config/loader.py
"""
Configuration loading with auto-creation of defaults.

Uses platformdirs for cross-platform config directory management. Deployment
secrets come from the environment (optionally via a local .env file).
"""

import logging
import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from platformdirs import user_config_path

from .schema import CicoBotConfig

logger = logging.getLogger(__name__)

APP_NAME = "cico-bot"

# env var -> (section, field)
ENV_OVERRIDES = {
    "BOT_TOKEN": ("telegram", "bot_token"),
    "BASE_URL": ("portal", "base_url"),
    "CICO_DB_PATH": ("storage", "db_path"),
}


def get_config_dir() -> Path:
    """Get the config directory, creating it if needed."""
    return user_config_path(APP_NAME, ensure_exists=True)


def get_config_path() -> Path:
    """Get path to config file, ensuring config directory exists."""
    return get_config_dir() / "config.yaml"


def default_db_path() -> Path:
    """Default location of the user settings database."""
    return get_config_dir() / "settings.db"


def _apply_env_overrides(config_data: dict) -> dict:
    for env_name, (section, field) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config_data.setdefault(section, {})[field] = value
    return config_data


def load_config(path: Path | None = None) -> CicoBotConfig:
    """
    Load configuration from YAML file, then apply environment overrides.

    If the config file doesn't exist, creates it with defaults.
    Returns validated Pydantic model.
    """
    load_dotenv()
    config_path = path or get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        default_config = CicoBotConfig()
        with config_path.open("w") as f:
            yaml.safe_dump(
                default_config.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )
        logger.info(f"Created default config at {config_path}")
        config_data: dict = {}
    else:
        with config_path.open("r") as f:
            config_data = yaml.safe_load(f) or {}
        logger.info(f"Loaded config from {config_path}")

    return CicoBotConfig(**_apply_env_overrides(config_data))
