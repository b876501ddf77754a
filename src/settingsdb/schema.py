"""Storage schema for the settings table.

The unique index on ``Key`` is what guarantees key uniqueness, including
against writers in other processes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from settingsdb.models.settings_entry import SettingsEntry

TABLE_NAME = "Settings"
KEY_INDEX_NAME = "IX_Settings_Key"

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS "{TABLE_NAME}" (
    "Id" INTEGER PRIMARY KEY AUTOINCREMENT,
    "Key" INTEGER NOT NULL,
    "Value" TEXT NOT NULL DEFAULT '',
    "Description" TEXT NOT NULL DEFAULT ''
);
CREATE UNIQUE INDEX IF NOT EXISTS "{KEY_INDEX_NAME}" ON "{TABLE_NAME}" ("Key");
"""

SELECT_COLUMNS = '"Id", "Key", "Value", "Description"'


@dataclass
class SettingsRow:
    """One row of the ``Settings`` table."""

    id: int
    key: int
    value: str
    description: str

    @staticmethod
    def from_row(row: tuple[Any, ...]) -> SettingsRow:
        return SettingsRow(
            id=int(row[0]),
            key=int(row[1]),
            value="" if row[2] is None else str(row[2]),
            description="" if row[3] is None else str(row[3]),
        )


def row_to_entry(row: SettingsRow) -> SettingsEntry:
    """Convert a storage row into the public entry model."""
    return SettingsEntry(
        id=row.id,
        key=row.key,
        value=row.value,
        description=row.description,
    )


def entry_to_row(entry: SettingsEntry) -> SettingsRow:
    """Convert a public entry into a storage row. Inverse of ``row_to_entry``."""
    return SettingsRow(
        id=entry.id,
        key=entry.key,
        value=entry.value,
        description=entry.description,
    )
