"""Awaitable access to a settings database.

Every call runs the matching SettingsManager method in a worker thread, so
it never blocks the event loop. Each call still opens and closes its own
connection.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, TypeVar

from settingsdb.config import DEFAULT_DATABASE_NAME
from settingsdb.manager import SettingsManager
from settingsdb.models.settings_entry import SettingsEntry

T = TypeVar("T", str, int, bool, float)


class AsyncSettingsManager:
    """Async wrapper around SettingsManager."""

    def __init__(self, manager: SettingsManager) -> None:
        self._manager = manager

    @classmethod
    async def open(
        cls,
        name: str = DEFAULT_DATABASE_NAME,
        directory: str | Path | None = None,
    ) -> AsyncSettingsManager:
        """Create (if needed) and open a settings database."""
        manager = await asyncio.to_thread(SettingsManager, name, directory)
        return cls(manager)

    @property
    def db_path(self) -> str:
        return self._manager.db_path

    async def initialize(self) -> None:
        await asyncio.to_thread(self._manager.initialize)

    async def load_all(self) -> list[SettingsEntry]:
        return await asyncio.to_thread(self._manager.load_all)

    async def load_entry(self, key: int) -> SettingsEntry | None:
        return await asyncio.to_thread(self._manager.load_entry, key)

    async def load_value(self, key: int) -> str | None:
        return await asyncio.to_thread(self._manager.load_value, key)

    async def load_typed_value(self, key: int, as_type: type[T], default: T | None = None) -> T | None:
        return await asyncio.to_thread(self._manager.load_typed_value, key, as_type, default)

    async def add_entry(self, entry: SettingsEntry) -> SettingsEntry:
        return await asyncio.to_thread(self._manager.add_entry, entry)

    async def add_value(self, key: int, value: Any, description: str = "") -> SettingsEntry:
        return await asyncio.to_thread(self._manager.add_value, key, value, description)

    async def update_entry(self, entry: SettingsEntry) -> None:
        await asyncio.to_thread(self._manager.update_entry, entry)

    async def update_value(self, key: int, value: Any, description: str = "") -> None:
        await asyncio.to_thread(self._manager.update_value, key, value, description)

    async def delete_entry(self, entry: SettingsEntry | int) -> None:
        await asyncio.to_thread(self._manager.delete_entry, entry)
