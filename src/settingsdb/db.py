"""Database connection and transaction handling using APSW.

Every operation opens its own connection and closes it before returning;
no connection is cached between calls. Only schema initialisation may
create the database file.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

import apsw

from settingsdb.config import get_busy_timeout
from settingsdb.errors import StoreIOError
from settingsdb.schema import SCHEMA_SQL

log = logging.getLogger(__name__)

# apsw errors that mean the file is missing, unusable or held by another writer
_IO_ERRORS = (
    apsw.CantOpenError,
    apsw.IOError,
    apsw.PermissionsError,
    apsw.ReadOnlyError,
    apsw.FullError,
    apsw.NotADBError,
    apsw.BusyError,
    apsw.LockedError,
)

_OPEN_EXISTING = apsw.SQLITE_OPEN_READWRITE
_OPEN_OR_CREATE = apsw.SQLITE_OPEN_READWRITE | apsw.SQLITE_OPEN_CREATE


def _configure_connection(conn: apsw.Connection) -> None:
    """Apply standard PRAGMAs to a connection."""
    conn.execute(f"PRAGMA busy_timeout = {get_busy_timeout()};")


def _open(db_path: str, flags: int = _OPEN_EXISTING) -> apsw.Connection:
    try:
        conn = apsw.Connection(db_path, flags=flags)
    except _IO_ERRORS as exc:
        raise StoreIOError(db_path, str(exc)) from exc
    try:
        _configure_connection(conn)
    except _IO_ERRORS as exc:
        conn.close()
        raise StoreIOError(db_path, str(exc)) from exc
    return conn


@contextmanager
def connection(db_path: str) -> Generator[apsw.Connection]:
    """Open a connection for a single read and close it afterwards."""
    conn = _open(db_path)
    try:
        yield conn
    except _IO_ERRORS as exc:
        raise StoreIOError(db_path, str(exc)) from exc
    finally:
        conn.close()


@contextmanager
def transaction(db_path: str, flags: int = _OPEN_EXISTING) -> Generator[apsw.Cursor]:
    """Context manager for a single write transaction.

    Automatically commits on success, rolls back on exception, and closes
    the connection either way.
    """
    conn = _open(db_path, flags)
    try:
        cursor = conn.cursor()
        cursor.execute("BEGIN IMMEDIATE;")
        try:
            yield cursor
            cursor.execute("COMMIT;")
        except Exception:
            # SQLite may already have rolled back on I/O errors
            if not conn.getautocommit():
                cursor.execute("ROLLBACK;")
            raise
    except _IO_ERRORS as exc:
        raise StoreIOError(db_path, str(exc)) from exc
    finally:
        conn.close()


def init_db_at(db_path: str) -> None:
    """Create the database file and schema if they do not exist yet."""
    try:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StoreIOError(db_path, str(exc)) from exc

    existed = Path(db_path).exists()
    with transaction(db_path, _OPEN_OR_CREATE) as cursor:
        for _ in cursor.execute(SCHEMA_SQL):
            pass

    if not existed:
        log.info("Created settings database at %s", db_path)
    else:
        log.debug("Settings database at %s is ready", db_path)
