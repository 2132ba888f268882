"""Key-value storage backend tests"""
import errno

import pytest

from exam_tutor.errors import StorageError
from exam_tutor.storage import JsonFileStorage, MemoryStorage


# ── MemoryStorage ─────────────────────────────────────────────────────────────


def test_memory_set_and_get():
    storage = MemoryStorage()
    storage.set("k", "value")
    assert storage.get("k") == "value"


def test_memory_get_unknown_returns_none():
    assert MemoryStorage().get("missing") is None


def test_memory_remove_is_idempotent():
    storage = MemoryStorage()
    storage.set("k", "v")
    storage.remove("k")
    storage.remove("k")
    assert storage.get("k") is None


def test_memory_quota_rejects_oversized_value():
    storage = MemoryStorage(quota_bytes=4)
    with pytest.raises(StorageError):
        storage.set("k", "12345")
    assert storage.get("k") is None


def test_memory_quota_allows_value_at_limit():
    storage = MemoryStorage(quota_bytes=4)
    storage.set("k", "1234")
    assert storage.get("k") == "1234"


# ── JsonFileStorage ───────────────────────────────────────────────────────────


def test_file_set_persists_across_instances(tmp_path):
    JsonFileStorage(tmp_path).set("history", "[1]")
    assert JsonFileStorage(tmp_path).get("history") == "[1]"


def test_file_writes_key_named_file(tmp_path):
    JsonFileStorage(tmp_path).set("history", "[]")
    assert (tmp_path / "history.json").read_text() == "[]"


def test_file_creates_missing_directory(tmp_path):
    storage = JsonFileStorage(tmp_path / "nested" / "dir")
    storage.set("k", "v")
    assert storage.get("k") == "v"


def test_file_get_missing_returns_none(tmp_path):
    assert JsonFileStorage(tmp_path).get("nothing") is None


def test_file_remove_deletes_file(tmp_path):
    storage = JsonFileStorage(tmp_path)
    storage.set("k", "v")
    storage.remove("k")
    assert not (tmp_path / "k.json").exists()
    storage.remove("k")


def test_file_quota_keeps_previous_value(tmp_path):
    storage = JsonFileStorage(tmp_path, quota_bytes=3)
    storage.set("k", "abc")
    with pytest.raises(StorageError):
        storage.set("k", "abcd")
    assert storage.get("k") == "abc"


def test_file_disk_full_becomes_storage_error(tmp_path, monkeypatch):
    storage = JsonFileStorage(tmp_path)

    def _full(*_args, **_kwargs):
        raise OSError(errno.ENOSPC, "No space left on device")

    monkeypatch.setattr("pathlib.Path.write_text", _full)
    with pytest.raises(StorageError):
        storage.set("k", "v")


def test_file_other_os_errors_propagate(tmp_path, monkeypatch):
    storage = JsonFileStorage(tmp_path)

    def _denied(*_args, **_kwargs):
        raise PermissionError(errno.EACCES, "Permission denied")

    monkeypatch.setattr("pathlib.Path.write_text", _denied)
    with pytest.raises(PermissionError):
        storage.set("k", "v")
