# brewlog_backend/app/services/data_stores/kv.py
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from brewlog_backend.app.config.manifest import Settings
from brewlog_backend.app.db.models import KeyValueEntry
from brewlog_backend.app.db.session import init_db, make_engine
from brewlog_backend.app.utils.log import get_logger
from .io_utils import read_json, write_json

log = get_logger("kv")


class PersistenceError(RuntimeError):
    """Reading or writing the persisted blob failed."""


class KeyValueStore(Protocol):
    """Flat, app-scoped string store (one value per key)."""

    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

class MemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """
    One JSON object file holding every key. Each set/delete rewrites the
    whole file atomically; an unreadable file reads as empty.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        doc = read_json(self.path, default={})
        if not isinstance(doc, dict):
            log.warning("key-value file %s is not an object; treating as empty", self.path)
            return {}
        return doc

    def _save(self, doc: Dict[str, str]) -> None:
        try:
            write_json(self.path, doc)
        except OSError as e:
            raise PersistenceError(f"cannot write {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        if value is not None and not isinstance(value, str):
            # array written inline instead of as a string blob
            return json.dumps(value)
        return value

    def set(self, key: str, value: str) -> None:
        doc = self._load()
        doc[key] = value
        self._save(doc)

    def delete(self, key: str) -> None:
        doc = self._load()
        if key in doc:
            del doc[key]
            self._save(doc)


class SqlKeyValueStore:
    """kv_entry table through sqlmodel; works with any SQLAlchemy URL."""

    def __init__(self, db_url: str) -> None:
        self.db_url = db_url
        self._engine = make_engine(db_url)
        try:
            init_db(self._engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"cannot initialise {db_url}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        try:
            with Session(self._engine) as session:
                row = session.get(KeyValueEntry, key)
                return row.value if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"cannot read {key!r}: {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with Session(self._engine) as session:
                row = session.get(KeyValueEntry, key)
                if row:
                    row.value = value
                    row.updated_at = datetime.now(timezone.utc)
                else:
                    row = KeyValueEntry(key=key, value=value)
                session.add(row)
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"cannot write {key!r}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            with Session(self._engine) as session:
                row = session.get(KeyValueEntry, key)
                if row:
                    session.delete(row)
                    session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"cannot delete {key!r}: {e}") from e

    def close(self) -> None:
        self._engine.dispose()


def open_kv_store(settings: Settings) -> KeyValueStore:
    if settings.store_backend == "memory":
        return MemoryKeyValueStore()
    if settings.store_backend == "sqlite":
        return SqlKeyValueStore(settings.resolved_db_url())
    return JsonFileKeyValueStore(settings.resolved_data_file())


__all__ = [
    "PersistenceError", "KeyValueStore",
    "MemoryKeyValueStore", "JsonFileKeyValueStore", "SqlKeyValueStore",
    "open_kv_store",
]
