# brewlog_backend/app/services/data_stores/__init__.py
"""
Unified export surface for data store helpers.

Import from here in UI/glue code, e.g.:
    from brewlog_backend.app.services.data_stores import (
        # Store
        BrewLogStore, open_store,
        # Key-value backends
        JsonFileKeyValueStore, SqlKeyValueStore, MemoryKeyValueStore,
    )
"""

from __future__ import annotations

# ---- Low-level IO helpers ----
from .io_utils import read_json, atomic_write, write_json  # noqa: F401

# ---- Key-value backends ----
from .kv import (  # noqa: F401
    KeyValueStore,
    MemoryKeyValueStore,
    JsonFileKeyValueStore,
    SqlKeyValueStore,
    PersistenceError,
    open_kv_store,
)

# ---- Brew log store ----
from .brew_logs import (  # noqa: F401
    BrewLogStore,
    open_store,
    DuplicateIdError,
    NotFoundError,
    encode_logs,
    decode_logs,
)

__all__ = [
    # io_utils
    "read_json", "atomic_write", "write_json",
    # kv
    "KeyValueStore", "MemoryKeyValueStore", "JsonFileKeyValueStore", "SqlKeyValueStore",
    "PersistenceError", "open_kv_store",
    # brew logs
    "BrewLogStore", "open_store", "DuplicateIdError", "NotFoundError",
    "encode_logs", "decode_logs",
]
