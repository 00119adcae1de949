# cico_bot/models/store.py
"""
Settings store protocol definition.

Defines the abstract interface that both InMemorySettingsStore and
SQLiteSettingsStore implement. The convenience mutators are shared here so
every backend applies the same read-modify-write rules.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cico_bot.models.settings import UserSettings


class SettingsStore(ABC):
    """
    Abstract base class for per-user settings storage.

    Callers only ever see normalized UserSettings; legacy stored shapes are
    converted on read.
    """

    async def initialize(self) -> None:
        """Prepare the backend (no-op by default)."""

    async def close(self) -> None:
        """Release backend resources (no-op by default)."""

    @abstractmethod
    async def get(self, user_id: int | str) -> "UserSettings":
        """
        Get settings for a user.

        Args:
            user_id: Messaging user identifier

        Returns:
            UserSettings (defaults if the user has never been stored)
        """

    @abstractmethod
    async def put(self, user_id: int | str, settings: "UserSettings") -> None:
        """
        Replace a user's settings with the canonical stored shape.

        Args:
            user_id: Messaging user identifier
            settings: Settings to persist
        """

    @abstractmethod
    async def list_all(self) -> "dict[str, UserSettings]":
        """
        List settings for every stored user.

        Returns:
            Mapping of user id (as string) to UserSettings
        """

    async def save_token(self, user_id: int | str, token: str | None) -> None:
        """Store (or clear, with None) the portal auth token."""
        settings = await self.get(user_id)
        await self.put(user_id, settings.model_copy(update={"auth_token": token}))

    async def set_stretch(self, user_id: int | str, enabled: bool) -> None:
        """Enable or disable vertical image stretching."""
        settings = await self.get(user_id)
        await self.put(user_id, settings.model_copy(update={"stretch_images": enabled}))

    async def set_dump_destination(self, user_id: int | str, destination: str | None) -> None:
        """Set the channel that receives bulk exports."""
        settings = await self.get(user_id)
        await self.put(
            user_id, settings.model_copy(update={"dump_destination": destination})
        )
