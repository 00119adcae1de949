# cico_bot/export/registry.py
"""
Process-scoped per-user state.

Each registry is owned by exactly one component (the export controller owns
running exports, the login wizard owns pending logins). Entries are created
when a flow starts and removed when it reaches a terminal state.

All access happens on the bot's event loop, so claim() is atomic with
respect to other handlers: there is no await between its check and its set.
"""

import logging
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UserRegistry(Generic[T]):
    """Map of user id -> state with explicit create/delete lifecycle."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: dict[int, T] = {}

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, user_id: int) -> T | None:
        return self._entries.get(user_id)

    def claim(self, user_id: int, value: T) -> bool:
        """
        Register `value` for a user unless one is already present.

        Returns:
            True if registered, False if the user already had an entry
        """
        if user_id in self._entries:
            return False
        self._entries[user_id] = value
        logger.debug(f"{self.name}: claimed entry for user {user_id}")
        return True

    def set(self, user_id: int, value: T) -> None:
        """Create or replace a user's entry."""
        self._entries[user_id] = value

    def release(self, user_id: int) -> T | None:
        """Remove and return a user's entry (None if absent)."""
        value = self._entries.pop(user_id, None)
        if value is not None:
            logger.debug(f"{self.name}: released entry for user {user_id}")
        return value
