# brewlog_backend/tests/test_persistence.py
import json
import logging
from datetime import datetime, timezone

import pytest

from brewlog_backend.app.schemas import (
    BLOB_FIELDS,
    BrewLogRecord,
    BrewMethod,
    RoastLevel,
    TemperatureUnit,
    WaterTemperature,
)
from brewlog_backend.app.services.data_stores import (
    BrewLogStore,
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
    PersistenceError,
    SqlKeyValueStore,
    decode_logs,
    encode_logs,
)
from brewlog_backend.app.services.data_stores.io_utils import atomic_write

# Purpose:
# The single persisted blob: restart round trip, corrupt data recovery,
# first-run seeding and write failures that must not lose in-session data.

def _full_record(make_log):
    return make_log(
        timestamp=datetime(2025, 3, 14, 8, 5, 9, 123456, tzinfo=timezone.utc),
        grind_setting="Medium-Fine",
        method=BrewMethod.POUR_OVER,
        roast_level=RoastLevel.MEDIUM_LIGHT,
        water_temperature=WaterTemperature(value=94.0, unit=TemperatureUnit.CELSIUS),
        brew_time=195.0,
        notes="Fruity, bright finish.",
        rating=4,
        grinder_type="Comandante C40",
    )

def test_restart_round_trip_json_file(kv_file, make_log):
    s1 = BrewLogStore(JsonFileKeyValueStore(kv_file))
    s1.initialize()
    rec = s1.add(_full_record(make_log))
    minimal = s1.add(make_log(coffee_name="Plain"))

    # new store over the same file simulates an app restart
    s2 = BrewLogStore(JsonFileKeyValueStore(kv_file))
    assert s2.initialize() == (rec, minimal)
    assert s2.logs[0].water_temperature.unit is TemperatureUnit.CELSIUS
    assert s2.logs[1].water_temperature is None

def test_restart_round_trip_sqlite(tmp_data_tree, make_log):
    url = f"sqlite:///{tmp_data_tree / 'kv.sqlite3'}"
    kv1 = SqlKeyValueStore(url)
    s1 = BrewLogStore(kv1)
    s1.initialize()
    rec = s1.add(_full_record(make_log))
    s1.update(rec.model_copy(update={"rating": 5}))
    kv1.close()

    kv2 = SqlKeyValueStore(url)
    s2 = BrewLogStore(kv2)
    s2.initialize()
    assert len(s2) == 1
    assert s2.logs[0].id == rec.id and s2.logs[0].rating == 5
    kv2.close()

def test_blob_layout(make_log):
    rec = _full_record(make_log)
    doc = json.loads(encode_logs([rec]))
    assert isinstance(doc, list) and len(doc) == 1
    assert tuple(doc[0].keys()) == BLOB_FIELDS
    assert doc[0]["id"] == str(rec.id)
    assert doc[0]["timestamp"] == "2025-03-14T08:05:09.123456+00:00"
    assert doc[0]["method"] == "pour-over"
    assert doc[0]["roastLevel"] == "medium-light"
    assert doc[0]["waterTemperature"] == 94.0
    assert doc[0]["temperatureUnit"] == "celsius"

def test_optional_fields_serialize_as_null(make_log):
    doc = json.loads(encode_logs([make_log()]))[0]
    for key in ("waterTemperature", "temperatureUnit", "brewTime", "notes", "rating"):
        assert key in doc and doc[key] is None

@pytest.mark.parametrize("blob", [
    "not json at all",
    '{"a": 1}',
    "[1, 2]",
    '[{"id": "x"}]',
])
def test_decode_rejects_bad_blobs(blob):
    with pytest.raises(PersistenceError):
        decode_logs(blob)

def test_decode_rejects_half_temperature_pair(make_log):
    doc = json.loads(encode_logs([make_log()]))
    doc[0]["waterTemperature"] = 93.0
    with pytest.raises(PersistenceError):
        decode_logs(json.dumps(doc))

def test_decode_rejects_repeated_ids(make_log):
    rec = make_log()
    with pytest.raises(PersistenceError):
        decode_logs(encode_logs([rec, rec]))

def test_corrupt_blob_is_discarded(caplog):
    kv = MemoryKeyValueStore({"brewLogsData": "{{{ definitely not json"})
    s = BrewLogStore(kv)
    with caplog.at_level(logging.WARNING, logger="brewlog.store"):
        assert s.initialize() == ()
    assert kv.get("brewLogsData") is None
    assert "discarding" in caplog.text

def test_corrupt_file_kv_recovers(kv_file, make_log):
    kv_file.write_text("\x00garbage", encoding="utf-8")
    s = BrewLogStore(JsonFileKeyValueStore(kv_file))
    assert s.initialize() == ()
    rec = s.add(make_log())
    s2 = BrewLogStore(JsonFileKeyValueStore(kv_file))
    assert s2.initialize() == (rec,)

def test_missing_data_starts_empty_without_seed():
    kv = MemoryKeyValueStore()
    s = BrewLogStore(kv)
    assert s.initialize() == ()
    assert kv.get(s.key) is None

def test_seed_samples_on_first_run_only():
    kv = MemoryKeyValueStore()
    s = BrewLogStore(kv, seed_samples=True)
    seeded = s.initialize()
    assert [r.coffee_name for r in seeded] == ["Morning Delight", "Dark Roast"]
    assert kv.get(s.key) is not None

    s.delete([0, 1])
    again = BrewLogStore(kv, seed_samples=True)
    assert again.initialize() == ()

def test_custom_storage_key(make_log):
    kv = MemoryKeyValueStore()
    s = BrewLogStore(kv, key="journal")
    s.initialize()
    s.add(make_log())
    assert kv.get("journal") is not None
    assert kv.get("brewLogsData") is None


class _BrokenKV(MemoryKeyValueStore):
    fail_writes = True

    def set(self, key, value):
        if self.fail_writes:
            raise PersistenceError("disk full")
        super().set(key, value)

def test_write_failure_keeps_memory_state(make_log, caplog):
    kv = _BrokenKV()
    s = BrewLogStore(kv)
    s.initialize()
    with caplog.at_level(logging.ERROR, logger="brewlog.store"):
        rec = s.add(make_log())
    assert s.logs == (rec,)
    assert isinstance(s.last_persist_error, PersistenceError)
    assert kv.get(s.key) is None
    assert "failed to save" in caplog.text

    kv.fail_writes = False
    s.update(rec.model_copy(update={"rating": 3}))
    assert s.last_persist_error is None
    assert decode_logs(kv.get(s.key))[0].rating == 3

def test_stale_blob_survives_failed_write(make_log):
    kv = _BrokenKV()
    kv.fail_writes = False
    s = BrewLogStore(kv)
    s.initialize()
    first = s.add(make_log(coffee_name="Saved"))
    kv.fail_writes = True
    s.add(make_log(coffee_name="Unsaved"))

    restarted = BrewLogStore(kv)
    assert restarted.initialize() == (first,)

def test_read_failure_treated_as_no_data():
    class _UnreadableKV(MemoryKeyValueStore):
        def get(self, key):
            raise PersistenceError("locked")

    s = BrewLogStore(_UnreadableKV(), seed_samples=True)
    assert s.initialize() == ()

def test_inline_array_in_file_is_read(kv_file, make_log):
    rec = make_log()
    kv_file.write_text(json.dumps({"brewLogsData": [rec.to_blob()]}), encoding="utf-8")
    s = BrewLogStore(JsonFileKeyValueStore(kv_file))
    assert s.initialize() == (rec,)

def test_encode_failure_is_persistence_error(make_log):
    # model_copy skips validation, so to_blob sees a bare float
    bad = make_log().model_copy(update={"water_temperature": 94.0})
    with pytest.raises(PersistenceError):
        encode_logs([bad])

def test_encode_failure_during_save_keeps_memory_state(monkeypatch, make_log, caplog):
    def _boom(self):
        raise AttributeError("cannot flatten record")

    kv = MemoryKeyValueStore()
    s = BrewLogStore(kv)
    s.initialize()
    monkeypatch.setattr(BrewLogRecord, "to_blob", _boom)
    with caplog.at_level(logging.ERROR, logger="brewlog.store"):
        rec = s.add(make_log())
    assert s.logs == (rec,)
    assert isinstance(s.last_persist_error, PersistenceError)
    assert kv.get(s.key) is None
    assert "failed to save" in caplog.text

def test_failed_write_leaves_no_temp_file(tmp_data_tree):
    target = tmp_data_tree / "out" / "doc.json"
    atomic_write(target, "[]")
    with pytest.raises(TypeError):
        atomic_write(target, 42)  # write() rejects non-str before anything lands
    assert sorted(p.name for p in target.parent.iterdir()) == ["doc.json"]
    assert target.read_text(encoding="utf-8") == "[]"
