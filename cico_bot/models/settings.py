# cico_bot/models/settings.py
"""
Per-user settings and in-memory storage.

Stored values come in two shapes: the canonical object
{"token": ..., "stretch": ..., "dumpChannel": ...} and a legacy bare token
string. UserSettings.from_stored() is the only place that knows about both.
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cico_bot.models.store import SettingsStore

logger = logging.getLogger(__name__)


class UserSettings(BaseModel):
    """Normalized per-user settings."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    auth_token: str | None = Field(default=None, alias="token")
    stretch_images: bool = Field(default=True, alias="stretch")
    dump_destination: str | None = Field(default=None, alias="dumpChannel")

    @classmethod
    def from_stored(cls, value: Any) -> "UserSettings":
        """
        Normalize a stored value into UserSettings.

        Args:
            value: None, a legacy token string, or a settings dict

        Returns:
            UserSettings (defaults when value is None)

        Raises:
            TypeError: If value has an unsupported shape
        """
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls(auth_token=value, stretch_images=True)
        if isinstance(value, dict):
            return cls(
                auth_token=value.get("token"),
                # Only an explicit false disables stretching
                stretch_images=value.get("stretch") is not False,
                dump_destination=value.get("dumpChannel"),
            )
        raise TypeError(f"Unsupported stored settings type: {type(value).__name__}")

    def to_stored(self) -> dict[str, Any]:
        """Canonical stored shape (portal-era key names)."""
        return self.model_dump(by_alias=True)


class InMemorySettingsStore(SettingsStore):
    """
    Dict-backed settings store.

    Keeps raw stored values so legacy shapes can be seeded in tests.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})
        logger.info("Initialized InMemorySettingsStore")

    async def get(self, user_id: int | str) -> UserSettings:
        return UserSettings.from_stored(self._data.get(str(user_id)))

    async def put(self, user_id: int | str, settings: UserSettings) -> None:
        self._data[str(user_id)] = settings.to_stored()

    async def list_all(self) -> dict[str, UserSettings]:
        return {
            user_id: UserSettings.from_stored(value)
            for user_id, value in sorted(self._data.items())
        }
