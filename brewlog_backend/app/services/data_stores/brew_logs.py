# brewlog_backend/app/services/data_stores/brew_logs.py
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union
from uuid import UUID

from brewlog_backend.app.config.manifest import DEFAULT_STORAGE_KEY, Settings, load_settings
from brewlog_backend.app.db.seed import sample_logs
from brewlog_backend.app.schemas import BrewLogFields, BrewLogRecord
from brewlog_backend.app.services.validation import revalidate, validate_fields
from brewlog_backend.app.utils.log import get_logger, set_level
from .kv import KeyValueStore, PersistenceError, open_kv_store

log = get_logger("store")

IdLike = Union[UUID, str]


class DuplicateIdError(ValueError):
    """add() was handed a record whose id is already stored (caller bug)."""


class NotFoundError(KeyError):
    """No record with the given id."""


# ---------------------------------------------------------------------------
# Blob codec
# ---------------------------------------------------------------------------

def encode_logs(records: Sequence[BrewLogRecord]) -> str:
    """
    Whole collection -> one JSON array (the persisted blob). Any failure,
    including a record whose fields no longer fit to_blob(), is a
    PersistenceError.
    """
    try:
        return json.dumps([r.to_blob() for r in records], ensure_ascii=False, allow_nan=False)
    except (AttributeError, TypeError, ValueError) as e:
        raise PersistenceError(f"cannot encode brew logs: {e}") from e

def decode_logs(blob: str) -> List[BrewLogRecord]:
    """
    Inverse of encode_logs(). Any shape problem (bad JSON, not a list, an
    invalid record, repeated ids) raises PersistenceError.
    """
    try:
        raw = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"brew log blob is not JSON: {e}") from e
    if not isinstance(raw, list):
        raise PersistenceError(f"brew log blob must be a list, got {type(raw).__name__}")

    out: List[BrewLogRecord] = []
    seen: set[UUID] = set()
    for i, item in enumerate(raw):
        try:
            rec = BrewLogRecord.from_blob(item)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"brew log #{i} is invalid: {e}") from e
        if rec.id in seen:
            raise PersistenceError(f"brew log #{i} repeats id {rec.id}")
        seen.add(rec.id)
        out.append(rec)
    return out

def _as_uuid(value: IdLike) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class BrewLogStore:
    """
    Owns the ordered brew log list and mirrors it to one key of a key-value
    backend. Every successful add/update/delete rewrites the whole blob.

    A failed write is logged and kept in `last_persist_error`; the in-memory
    change stays. Single-threaded: no locking.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        seed_samples: bool = False,
        settings: Optional[Settings] = None,
    ) -> None:
        self._kv = kv
        self.key = key
        self.seed_samples = seed_samples
        self.settings = settings
        self._logs: List[BrewLogRecord] = []
        self.last_persist_error: Optional[PersistenceError] = None

    # ---- read side ----
    @property
    def logs(self) -> Tuple[BrewLogRecord, ...]:
        """Snapshot for rendering; mutating it does not touch the store."""
        return tuple(self._logs)

    def __len__(self) -> int:
        return len(self._logs)

    def __iter__(self) -> Iterator[BrewLogRecord]:
        return iter(self.logs)

    def __contains__(self, item: Any) -> bool:
        rid = item.id if isinstance(item, BrewLogRecord) else _as_uuid(item)
        return rid is not None and self._index_of(rid) is not None

    def get(self, record_id: IdLike) -> Optional[BrewLogRecord]:
        rid = _as_uuid(record_id)
        idx = self._index_of(rid) if rid else None
        return self._logs[idx] if idx is not None else None

    def require(self, record_id: IdLike) -> BrewLogRecord:
        rec = self.get(record_id)
        if rec is None:
            raise NotFoundError(str(record_id))
        return rec

    def _index_of(self, rid: UUID) -> Optional[int]:
        for i, rec in enumerate(self._logs):
            if rec.id == rid:
                return i
        return None

    # ---- lifecycle ----
    def initialize(self) -> Tuple[BrewLogRecord, ...]:
        """
        Load the persisted collection. Missing data gives an empty list (or
        the samples when seeding is on); corrupt data is discarded.
        """
        try:
            blob = self._kv.get(self.key)
        except PersistenceError as e:
            log.error("could not read brew logs (%s); starting with none", e)
            self._logs = []
            return self.logs

        if blob is None:
            if self.seed_samples:
                self._logs = sample_logs()
                log.info("no saved brew logs; seeded %d samples", len(self._logs))
                self._persist()
            else:
                self._logs = []
                log.info("no saved brew logs; starting fresh")
            return self.logs

        try:
            self._logs = decode_logs(blob)
        except PersistenceError as e:
            log.warning("discarding unreadable brew logs: %s", e)
            self._logs = []
            try:
                self._kv.delete(self.key)
            except PersistenceError as del_err:
                log.error("could not clear unreadable brew logs: %s", del_err)
            return self.logs

        log.info("loaded %d brew logs", len(self._logs))
        return self.logs

    # ---- form input ----
    def record_from_fields(
        self,
        fields: Union[BrewLogFields, Dict[str, Any]],
        *,
        record_id: Optional[UUID] = None,
    ) -> BrewLogRecord:
        """validate_fields() with this store's configured grinder and water policy."""
        return validate_fields(fields, settings=self.settings, record_id=record_id)

    # ---- mutations ----
    def add(self, record: BrewLogRecord) -> BrewLogRecord:
        """
        Append and persist. Raises ValidationError for a record that breaks
        the model rules and DuplicateIdError for a known id; nothing changes
        in either case.
        """
        record = revalidate(record)
        if self._index_of(record.id) is not None:
            raise DuplicateIdError(f"brew log id already exists: {record.id}")
        self._logs.append(record)
        self._persist()
        return record

    def update(self, record: BrewLogRecord) -> bool:
        """
        Replace the entry with the same id in place. False if unknown.
        An invalid record raises ValidationError before anything changes.
        """
        record = revalidate(record)
        idx = self._index_of(record.id)
        if idx is None:
            log.warning("update skipped; brew log %s not found", record.id)
            return False
        self._logs[idx] = record
        self._persist()
        return True

    def delete(self, positions: Iterable[int]) -> int:
        """Remove entries at the given indices; bad indices are skipped."""
        wanted = set(positions)
        valid = sorted((i for i in wanted if isinstance(i, int) and 0 <= i < len(self._logs)), reverse=True)
        skipped = wanted.difference(valid)
        if skipped:
            log.warning("delete skipped unknown positions: %s", sorted(map(str, skipped)))
        for i in valid:
            del self._logs[i]
        if valid:
            self._persist()
        return len(valid)

    def delete_ids(self, ids: Iterable[IdLike]) -> int:
        """Remove entries by id; unknown ids are skipped."""
        positions: List[int] = []
        for raw in ids:
            rid = _as_uuid(raw)
            idx = self._index_of(rid) if rid else None
            if idx is None:
                log.warning("delete skipped; brew log %s not found", raw)
                continue
            positions.append(idx)
        return self.delete(positions) if positions else 0

    # ---- persistence ----
    def _persist(self) -> bool:
        try:
            self._kv.set(self.key, encode_logs(self._logs))
        except PersistenceError as e:
            self.last_persist_error = e
            log.error("failed to save brew logs (kept in memory): %s", e)
            return False
        self.last_persist_error = None
        log.debug("saved %d brew logs", len(self._logs))
        return True


def open_store(settings: Optional[Settings] = None) -> BrewLogStore:
    """Build the configured backend + store and load it."""
    settings = settings or load_settings()
    set_level(log, settings.log_level)
    store = BrewLogStore(
        open_kv_store(settings),
        key=settings.storage_key,
        seed_samples=settings.seed_samples,
        settings=settings,
    )
    store.initialize()
    return store


__all__ = [
    "BrewLogStore", "open_store",
    "DuplicateIdError", "NotFoundError", "PersistenceError",
    "encode_logs", "decode_logs",
]
