"""settingsdb - A small SQLite-backed key-value settings store."""

from settingsdb.aio import AsyncSettingsManager
from settingsdb.errors import KeyConflictError, SettingsError, StoreIOError, TypeCoercionError
from settingsdb.manager import SettingsManager
from settingsdb.models.settings_entry import SettingsEntry

__all__ = [
    "AsyncSettingsManager",
    "KeyConflictError",
    "SettingsEntry",
    "SettingsError",
    "SettingsManager",
    "StoreIOError",
    "TypeCoercionError",
]
