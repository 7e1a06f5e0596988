"""
Pytest configuration for test isolation.

Settings are cached process-wide and read from the environment and a
``.env`` file in the working directory, so every test gets a clean
environment, an empty temporary working directory and a fresh cache.
"""

import pytest

from ledger_view.config import get_settings

_SETTINGS_ENV = (
    "APP_ENV",
    "APP_LOG_LEVEL",
    "APP_LOG_JSON",
    "STATEMENTS_API_URL",
    "STATEMENTS_API_TIMEOUT_SECONDS",
    "STATEMENTS_API_TOKEN",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_TENANT_ID",
)


@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path, monkeypatch):
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
