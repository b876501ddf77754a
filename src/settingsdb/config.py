"""Database location and connection settings.

Values are resolved from explicit arguments first, then environment
variables, then built-in defaults.
"""

import logging
import os
from pathlib import Path

DEFAULT_DATABASE_NAME = "Settings.db"
DATABASE_SUFFIX = ".db"
DEFAULT_BUSY_TIMEOUT_MS = 5000

ENV_DIR = "SETTINGSDB_DIR"
ENV_BUSY_TIMEOUT = "SETTINGSDB_BUSY_TIMEOUT"

log = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Append the ``.db`` suffix unless the name already ends with it."""
    if not name.lower().endswith(DATABASE_SUFFIX):
        name += DATABASE_SUFFIX
    return name


def get_db_path(name: str = DEFAULT_DATABASE_NAME, directory: str | Path | None = None) -> str:
    """Resolve the database path.

    Priority:
      1. ``name`` itself when it is an absolute path
      2. ``directory`` argument
      3. SETTINGSDB_DIR environment variable
      4. current working directory
    """
    name = normalize_name(name)
    if Path(name).is_absolute():
        return name

    if directory is None:
        directory = os.environ.get(ENV_DIR) or Path.cwd()

    return str(Path(directory) / name)


def get_busy_timeout() -> int:
    """Milliseconds a connection waits on a locked database before failing."""
    raw = os.environ.get(ENV_BUSY_TIMEOUT)
    if not raw:
        return DEFAULT_BUSY_TIMEOUT_MS
    try:
        return max(0, int(raw))
    except ValueError:
        log.warning(
            "Ignoring invalid %s=%r, using %d ms", ENV_BUSY_TIMEOUT, raw, DEFAULT_BUSY_TIMEOUT_MS
        )
        return DEFAULT_BUSY_TIMEOUT_MS
