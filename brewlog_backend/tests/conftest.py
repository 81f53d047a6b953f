from __future__ import annotations
import os
import pytest

from brewlog_backend.app.schemas import BrewLogRecord
from brewlog_backend.app.services.data_stores import (
    BrewLogStore,
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
)

_BREWLOG_ENV = (
    "BREWLOG_SETTINGS",
    "BREWLOG_STORE_BACKEND",
    "BREWLOG_DATA_FILE",
    "BREWLOG_DB_URL",
    "BREWLOG_STORAGE_KEY",
    "BREWLOG_SEED_SAMPLES",
    "BREWLOG_DEFAULT_GRINDER",
    "BREWLOG_REQUIRE_WATER_AMOUNT",
    "BREWLOG_LOG_LEVEL",
)

# --- Data tree override: every test gets its own DATA_DIR ---
@pytest.fixture(autouse=True)
def tmp_data_tree(tmp_path, monkeypatch):
    data = tmp_path / "data"
    data.mkdir()
    monkeypatch.setenv("DATA_DIR", str(data))
    for name in _BREWLOG_ENV:
        monkeypatch.delenv(name, raising=False)
    return data

@pytest.fixture
def kv_file(tmp_data_tree):
    return tmp_data_tree / "brewlog.json"

@pytest.fixture
def file_kv(kv_file):
    return JsonFileKeyValueStore(kv_file)

@pytest.fixture
def store(file_kv):
    s = BrewLogStore(file_kv)
    s.initialize()
    return s

@pytest.fixture
def memory_store():
    s = BrewLogStore(MemoryKeyValueStore())
    s.initialize()
    return s

# --- Record factory ---
@pytest.fixture
def make_log():
    def _make(**overrides):
        values = {"coffee_name": "Morning", "dose": 18.0, "water_amount": 300.0}
        values.update(overrides)
        return BrewLogRecord(**values)
    return _make
