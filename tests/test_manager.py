import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import apsw
import pytest

from settingsdb import KeyConflictError, SettingsEntry, SettingsManager, StoreIOError, TypeCoercionError
from settingsdb.config import ENV_BUSY_TIMEOUT


def _key_set(manager):
    return {entry.key for entry in manager.load_all()}


# ---------------------------------------------------------------------------
# Initialize
# ---------------------------------------------------------------------------


def test_initialize_creates_file_with_suffix(tmp_path):
    manager = SettingsManager("ZimLabs.Settings", tmp_path)
    assert manager.db_path == str(tmp_path / "ZimLabs.Settings.db")
    assert Path(manager.db_path).is_file()


def test_initialize_creates_missing_directories(tmp_path):
    manager = SettingsManager("Settings.db", tmp_path / "a" / "b")
    assert Path(manager.db_path).is_file()


def test_initialize_is_idempotent(manager):
    manager.add_value(1, "kept", "d")
    manager.initialize()
    again = SettingsManager("Test", Path(manager.db_path).parent)
    assert again.load_value(1) == "kept"


def test_schema_has_unique_key_index(manager):
    conn = apsw.Connection(manager.db_path)
    try:
        indexes = conn.execute("PRAGMA index_list('Settings')").fetchall()
    finally:
        conn.close()
    unique = {str(row[1]) for row in indexes if row[2]}
    assert "IX_Settings_Key" in unique


def test_initialize_fails_for_unusable_location(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    with pytest.raises(StoreIOError):
        SettingsManager("Settings", blocker / "sub")


# ---------------------------------------------------------------------------
# Storage failures after initialize
# ---------------------------------------------------------------------------


def test_removed_file_raises_store_io_error(manager):
    os.remove(manager.db_path)

    with pytest.raises(StoreIOError):
        manager.load_all()
    with pytest.raises(StoreIOError):
        manager.load_entry(1)
    with pytest.raises(StoreIOError):
        manager.add_value(1, "x")
    with pytest.raises(StoreIOError):
        manager.update_value(1, "y")
    with pytest.raises(StoreIOError):
        manager.delete_entry(1)

    assert not Path(manager.db_path).exists()


def test_initialize_recreates_removed_file(manager):
    os.remove(manager.db_path)
    manager.initialize()
    assert manager.load_all() == []


def test_non_database_file_raises_store_io_error(manager):
    Path(manager.db_path).write_bytes(b"this is not a settings database\n" * 64)

    with pytest.raises(StoreIOError):
        manager.load_all()
    with pytest.raises(StoreIOError):
        manager.add_value(1, "x")


def test_locked_file_raises_store_io_error(manager, monkeypatch):
    manager.add_value(1, "before")
    monkeypatch.setenv(ENV_BUSY_TIMEOUT, "0")

    holder = apsw.Connection(manager.db_path)
    holder.execute("BEGIN EXCLUSIVE;")
    try:
        with pytest.raises(StoreIOError):
            manager.add_value(2, "x")
        with pytest.raises(StoreIOError):
            manager.update_value(1, "after")
        with pytest.raises(StoreIOError):
            manager.load_all()
    finally:
        holder.execute("ROLLBACK;")
        holder.close()

    assert _key_set(manager) == {1}
    assert manager.load_value(1) == "before"


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


def test_load_all_empty(manager):
    assert manager.load_all() == []


def test_load_missing_key(manager):
    assert manager.load_entry(99) is None
    assert manager.load_value(99) is None
    assert manager.load_typed_value(99, int) is None


def test_load_typed_value_default_when_missing(manager):
    assert manager.load_typed_value(99, int, 5) == 5


def test_load_entry_matches_added_entry(manager):
    entry = SettingsEntry(key=4, value="abc", description="letters")
    added = manager.add_entry(entry)
    loaded = manager.load_entry(4)
    assert loaded == SettingsEntry(id=added.id, key=4, value="abc", description="letters")


def test_load_typed_value(manager):
    manager.add_entry(SettingsEntry(key=2, value="10", description="d2"))
    manager.add_value(3, "true", "d3")
    manager.add_value(4, "2.5")
    assert manager.load_typed_value(2, int) == 10
    assert manager.load_typed_value(3, bool) is True
    assert manager.load_typed_value(4, float) == 2.5
    assert manager.load_typed_value(2, str) == "10"


def test_load_typed_value_coercion_error(manager):
    manager.add_value(5, "abc")
    with pytest.raises(TypeCoercionError) as excinfo:
        manager.load_typed_value(5, int)
    assert excinfo.value.key == 5
    assert excinfo.value.value == "abc"
    assert excinfo.value.as_type is int


def test_load_typed_value_unsupported_type(manager):
    manager.add_value(5, "abc")
    with pytest.raises(TypeError):
        manager.load_typed_value(5, list)


@pytest.mark.parametrize("value", [10, -7, True, False, 0.1, 1e100, "text"])
def test_add_value_round_trips_typed(manager, value):
    manager.add_value(1, value)
    assert manager.load_typed_value(1, type(value)) == value


# ---------------------------------------------------------------------------
# Add
# ---------------------------------------------------------------------------


def test_add_entry_ignores_caller_id(manager):
    entry = SettingsEntry(id=1000, key=2, value="10", description="Some description")
    added = manager.add_entry(entry)
    assert added.id != 1000
    assert added.id > 0
    assert entry.id == 1000


def test_add_entry_assigns_increasing_ids(manager):
    first = manager.add_value(1, "a")
    second = manager.add_value(2, "b")
    assert second.id > first.id


def test_ids_are_not_reused_after_delete(manager):
    manager.add_value(1, "a")
    last = manager.add_value(2, "b")
    manager.delete_entry(2)
    replacement = manager.add_value(2, "c")
    assert replacement.id > last.id


def test_add_duplicate_key_conflicts(manager):
    manager.add_value(1, "first", "original")
    with pytest.raises(KeyConflictError) as excinfo:
        manager.add_value(1, "second", "other")
    assert excinfo.value.key == 1

    entries = manager.load_all()
    assert len(entries) == 1
    assert entries[0].value == "first"
    assert entries[0].description == "original"


def test_concurrent_duplicate_adds_yield_one_entry(manager):
    def add(n):
        try:
            manager.add_value(42, f"writer {n}")
            return True
        except KeyConflictError:
            return False

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(add, range(8)))

    assert results.count(True) == 1
    assert len(manager.load_all()) == 1


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


def test_update_missing_key_is_noop(manager):
    manager.add_value(1, "a", "d")
    before = manager.load_all()
    manager.update_entry(SettingsEntry(key=2, value="b", description="x"))
    manager.update_value(3, "c")
    assert manager.load_all() == before


def test_update_keeps_existing_description(manager):
    manager.add_value(1, "old", "original")
    manager.update_entry(SettingsEntry(key=1, value="new", description="changed"))
    entry = manager.load_entry(1)
    assert entry.value == "new"
    assert entry.description == "original"


def test_update_fills_empty_description(manager):
    manager.add_value(1, "old")
    manager.update_value(1, "new", "now described")
    entry = manager.load_entry(1)
    assert entry.value == "new"
    assert entry.description == "now described"


def test_update_matches_by_key_not_id(manager):
    first = manager.add_value(1, "a")
    manager.add_value(2, "b")
    manager.update_entry(SettingsEntry(id=first.id, key=2, value="changed"))
    assert manager.load_value(1) == "a"
    assert manager.load_value(2) == "changed"


def test_update_value_converts_typed_value(manager):
    manager.add_value(1, 1)
    manager.update_value(1, False)
    assert manager.load_typed_value(1, bool) is False


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


def test_delete_by_key_and_entry(manager):
    manager.add_value(1, "a")
    entry = manager.add_value(2, "b")
    manager.add_value(3, "c")

    manager.delete_entry(1)
    assert manager.load_entry(1) is None
    assert len(manager.load_all()) == 2

    manager.delete_entry(entry)
    assert _key_set(manager) == {3}


def test_delete_missing_key_is_noop(manager):
    manager.add_value(1, "a")
    manager.delete_entry(5)
    assert _key_set(manager) == {1}


def test_store_is_reread_on_every_call(manager):
    other = SettingsManager("Test", Path(manager.db_path).parent)
    other.add_value(1, "from another manager")
    assert manager.load_value(1) == "from another manager"


def test_round_trip_scenario(tmp_path):
    manager = SettingsManager("ZimLabs.Settings", tmp_path)
    manager.add_value(1, "SomeValue", "d1")
    manager.add_value(2, 10, "d2")
    assert manager.load_typed_value(2, int) == 10
    manager.add_value(3, True, "d3")
    assert len(manager.load_all()) == 3

    manager.delete_entry(1)
    entries = manager.load_all()
    assert len(entries) == 2
    assert all(entry.key != 1 for entry in entries)


def test_load_typed_value_rejects_digit_separators(manager):
    manager.add_value(6, "1_000")
    with pytest.raises(TypeCoercionError):
        manager.load_typed_value(6, int)
