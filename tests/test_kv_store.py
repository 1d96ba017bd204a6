"""Tests for key-value storage backends"""

import json

import pytest

from medpass.storage.kv_store import InMemoryStore, JsonFileStore
from medpass.utils.exceptions import StorageError


def test_json_store_persists_and_removes(tmp_path):
    path = tmp_path / "nested" / "session.json"
    kv = JsonFileStore(path)

    kv.set_items({"a": "1", "b": "2"})
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1", "b": "2"}

    kv.remove_items(["a", "missing"])
    assert kv.get_item("a") is None
    assert kv.get_items(["a", "b"]) == {"a": None, "b": "2"}


def test_json_store_leaves_no_temp_files(tmp_path):
    kv = JsonFileStore(tmp_path / "session.json")
    for i in range(5):
        kv.set_item("counter", str(i))
    assert [p.name for p in tmp_path.iterdir()] == ["session.json"]


def test_json_store_failed_write_removes_temp_file(tmp_path, monkeypatch):
    kv = JsonFileStore(tmp_path / "session.json")
    kv.set_item("userId", "1")

    def failing_dump(obj, fp, **kwargs):
        fp.write('{"userId": ')
        raise OSError("disk full")

    monkeypatch.setattr("medpass.storage.kv_store.json.dump", failing_dump)

    with pytest.raises(StorageError, match="Failed to write"):
        kv.set_item("userId", "2")

    assert [p.name for p in tmp_path.iterdir()] == ["session.json"]
    monkeypatch.undo()
    assert kv.get_item("userId") == "1"


def test_json_store_missing_file_reads_empty(tmp_path):
    kv = JsonFileStore(tmp_path / "absent.json")
    assert kv.get_item("anything") is None
    kv.remove_items(["anything"])
    assert not (tmp_path / "absent.json").exists()


def test_json_store_corrupt_file_raises(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("[1, 2", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileStore(path).get_item("userToken")


def test_non_string_values_rejected(tmp_path):
    with pytest.raises(StorageError):
        InMemoryStore().set_items({"n": 1})
    with pytest.raises(StorageError):
        JsonFileStore(tmp_path / "s.json").set_item("n", None)
