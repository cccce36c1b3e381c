from unittest.mock import Mock

import pytest

from common.report_engine.errors import QuotaExceeded, StorageFullError, StoreWriteError
from common.report_engine.repair import repair_store
from common.report_engine.store import StoreAdapter, StoreKey, text_size
from common.report_engine.validator import validate_store
from connectors.storage.backends import InMemoryBackend, JsonFileBackend


def test_set_get_remove_round_trip():
    store = StoreAdapter(InMemoryBackend())
    result = store.set(StoreKey.CHECKLIST, "[]")
    assert result.ok
    assert store.get(StoreKey.CHECKLIST) == "[]"
    store.remove(StoreKey.CHECKLIST)
    assert store.get(StoreKey.CHECKLIST) is None


def test_unknown_keys_are_rejected():
    store = StoreAdapter(InMemoryBackend())
    with pytest.raises(ValueError):
        store.set("something-else", "x")


def test_quota_failure_is_returned_not_raised():
    store = StoreAdapter(InMemoryBackend(capacity_bytes=5), capacity_bytes=5)
    result = store.set(StoreKey.RULE_SETS, "[]")

    assert not result.ok
    assert isinstance(result.error, QuotaExceeded)
    assert result.error.key == StoreKey.RULE_SETS.value
    assert store.get(StoreKey.RULE_SETS) is None


def test_other_backend_failures_become_write_errors():
    backend = Mock()
    backend.set_item.side_effect = PermissionError("read-only")
    result = StoreAdapter(backend).set(StoreKey.CHECKLIST, "[]")

    assert isinstance(result.error, StoreWriteError)
    assert not isinstance(result.error, QuotaExceeded)
    assert "read-only" in str(result.error)


def test_read_failures_are_treated_as_absent(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("not json", encoding="utf-8")
    store = StoreAdapter(JsonFileBackend(path=path))
    assert store.get(StoreKey.CHECKLIST) is None


def test_storage_full_error_is_an_os_error():
    assert issubclass(StorageFullError, OSError)


def test_usage_counts_key_and_value_bytes():
    backend = InMemoryBackend()
    store = StoreAdapter(backend, capacity_bytes=1000)
    store.set(StoreKey.REPORT_RECORD, '{"description": "日本語"}')
    backend.set_item("unrelated", "x" * 50)

    usage = store.usage()

    expected = text_size(StoreKey.REPORT_RECORD.value, '{"description": "日本語"}')
    assert usage.used_bytes == expected
    assert usage.estimated_available_bytes == 1000 - expected
    assert usage.active_keys == [StoreKey.REPORT_RECORD.value]


def test_clear_all_only_touches_owned_keys():
    backend = InMemoryBackend()
    store = StoreAdapter(backend)
    for key in StoreKey:
        store.set(key, "[]")
    backend.set_item("unrelated", "keep")

    store.clear_all()

    assert backend.items == {"unrelated": "keep"}


def test_surrogate_text_does_not_break_sizes_or_writes(tmp_path):
    text = '["bad \ud800 text"]'
    memory = StoreAdapter(InMemoryBackend(capacity_bytes=10_000), capacity_bytes=10_000)
    assert memory.set(StoreKey.CHECKLIST, text).ok
    assert memory.usage().used_bytes == text_size(StoreKey.CHECKLIST.value, text)

    on_disk = StoreAdapter(JsonFileBackend(path=tmp_path / "store.json"))
    result = on_disk.set(StoreKey.CHECKLIST, text)
    assert isinstance(result.error, StoreWriteError)
    assert on_disk.get(StoreKey.CHECKLIST) is None


def test_corrupt_store_file_fails_validation_and_repair_resets_it(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{garbage", encoding="utf-8")
    store = StoreAdapter(JsonFileBackend(path=path))

    result = validate_store(store)
    assert not result.is_valid
    assert {error.field for error in result.errors} == {"ruleSets", "reportRecord", "checklist"}

    repair = repair_store(store)
    assert len(repair.actions) == 1
    assert "store could not be read" in repair.actions[0]
    assert validate_store(store).is_valid
    assert store.set(StoreKey.CHECKLIST, "[]").ok
