"""Settings manager: load, add, update and delete settings entries."""

import dataclasses
import logging
from pathlib import Path
from typing import Any, TypeVar, overload

import apsw

from settingsdb.config import DEFAULT_DATABASE_NAME, get_db_path
from settingsdb.convert import parse_value, python_type, resolve_type, to_text
from settingsdb.db import connection, init_db_at, transaction
from settingsdb.errors import KeyConflictError, TypeCoercionError
from settingsdb.models.settings_entry import SettingsEntry
from settingsdb.schema import SELECT_COLUMNS, TABLE_NAME, SettingsRow, entry_to_row, row_to_entry

log = logging.getLogger(__name__)

T = TypeVar("T", str, int, bool, float)


class SettingsManager:
    """Access to a file-backed settings database.

    Each method opens the database, does its work and closes it again, so
    instances hold no connection and can be shared between threads.
    """

    def __init__(
        self,
        name: str = DEFAULT_DATABASE_NAME,
        directory: str | Path | None = None,
    ) -> None:
        self.db_path = get_db_path(name, directory)
        self.initialize()

    def initialize(self) -> None:
        """Create the database file and schema if missing. Safe to call repeatedly."""
        init_db_at(self.db_path)

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load_all(self) -> list[SettingsEntry]:
        """Load every settings entry."""
        with connection(self.db_path) as db:
            rows = db.execute(f'SELECT {SELECT_COLUMNS} FROM "{TABLE_NAME}" ORDER BY "Id"').fetchall()
        return [row_to_entry(SettingsRow.from_row(row)) for row in rows]

    def load_entry(self, key: int) -> SettingsEntry | None:
        """Load the entry with the given key, or None if there is none."""
        with connection(self.db_path) as db:
            row = db.execute(
                f'SELECT {SELECT_COLUMNS} FROM "{TABLE_NAME}" WHERE "Key" = ?',
                (key,),
            ).fetchone()
        return row_to_entry(SettingsRow.from_row(row)) if row else None

    def load_value(self, key: int) -> str | None:
        """Load the text value of an entry, or None if there is none."""
        entry = self.load_entry(key)
        return entry.value if entry else None

    @overload
    def load_typed_value(self, key: int, as_type: type[T]) -> T | None: ...

    @overload
    def load_typed_value(self, key: int, as_type: type[T], default: T) -> T: ...

    def load_typed_value(self, key: int, as_type: type[T], default: T | None = None) -> T | None:
        """Load the value of an entry converted to ``as_type``.

        ``as_type`` must be one of str, int, bool or float. Returns
        ``default`` when the key does not exist and raises
        TypeCoercionError when the stored text is not a valid ``as_type``.
        """
        value_type = resolve_type(as_type)

        raw = self.load_value(key)
        if raw is None:
            return default

        try:
            return parse_value(value_type, raw)  # type: ignore[return-value]
        except ValueError as exc:
            raise TypeCoercionError(key, raw, python_type(value_type)) from exc

    # ------------------------------------------------------------------
    # Add
    # ------------------------------------------------------------------

    def add_value(self, key: int, value: Any, description: str = "") -> SettingsEntry:
        """Add a new entry, storing ``value`` in its canonical text form.

        Raises KeyConflictError when the key is already in use.
        """
        return self.add_entry(SettingsEntry(key=key, value=to_text(value), description=description))

    def add_entry(self, entry: SettingsEntry) -> SettingsEntry:
        """Add a new entry and return it with its assigned id.

        Any id set on ``entry`` is ignored. Raises KeyConflictError when the
        key is already in use; the existing entry is left as it was.
        """
        row = entry_to_row(dataclasses.replace(entry, id=0))

        try:
            with transaction(self.db_path) as cursor:
                cursor.execute(
                    f'INSERT INTO "{TABLE_NAME}" ("Key", "Value", "Description") VALUES (?, ?, ?)',
                    (row.key, row.value, row.description),
                )
                result = cursor.execute("SELECT last_insert_rowid()").fetchone()
                row.id = int(result[0]) if result else 0
        except apsw.ConstraintError as exc:
            if "UNIQUE" not in str(exc).upper():
                raise
            raise KeyConflictError(entry.key) from exc

        log.debug("Added settings entry id=%s key=%s", row.id, row.key)
        return row_to_entry(row)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update_value(self, key: int, value: Any, description: str = "") -> None:
        """Update the value of the entry with the given key.

        An empty ``description`` keeps the stored one.
        """
        self.update_entry(SettingsEntry(key=key, value=to_text(value), description=description))

    def update_entry(self, entry: SettingsEntry) -> None:
        """Update the stored entry that has the same key as ``entry``.

        Does nothing when no entry has that key. The value is always
        replaced. The description is only written when the stored one is
        empty: a non-empty stored description is kept even if ``entry``
        carries a different one.

        NOTE: keeping the stored description looks like a defect in the
        behaviour this reproduces; callers that need to change a
        description must delete and re-add the entry.
        """
        with transaction(self.db_path) as cursor:
            cursor.execute(
                f'UPDATE "{TABLE_NAME}" SET "Value" = ?, '
                '"Description" = CASE WHEN "Description" = \'\' THEN ? ELSE "Description" END '
                'WHERE "Key" = ?',
                (entry.value, entry.description, entry.key),
            )
            changed = cursor.execute("SELECT changes()").fetchone()[0]  # type: ignore[index]

        if changed:
            log.debug("Updated settings entry key=%s", entry.key)
        else:
            log.debug("No settings entry with key=%s to update", entry.key)

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete_entry(self, entry: SettingsEntry | int) -> None:
        """Delete the entry with the key of ``entry`` (an entry or a key).

        Does nothing when no entry has that key.
        """
        key = entry.key if isinstance(entry, SettingsEntry) else entry

        with transaction(self.db_path) as cursor:
            cursor.execute(f'DELETE FROM "{TABLE_NAME}" WHERE "Key" = ?', (key,))
            changed = cursor.execute("SELECT changes()").fetchone()[0]  # type: ignore[index]

        if changed:
            log.debug("Deleted settings entry key=%s", key)
