import pytest

from settingsdb.config import ENV_BUSY_TIMEOUT, ENV_DIR
from settingsdb.manager import SettingsManager


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(ENV_DIR, raising=False)
    monkeypatch.delenv(ENV_BUSY_TIMEOUT, raising=False)


@pytest.fixture
def manager(tmp_path):
    return SettingsManager("Test", tmp_path)
