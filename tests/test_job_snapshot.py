"""Tests for JobSnapshotStore and the key-value storage adapters.

load() must never raise: absent keys, unparseable JSON, wrong shapes and
storage failures all produce an empty list. save() failures are logged only.
"""

import json
import os

import pytest
from unittest.mock import Mock

from jobwatch.adapters.key_value_store_file import FileKeyValueStore
from jobwatch.core.exceptions import PersistenceError
from jobwatch.core.managers.job_snapshot import JobSnapshotStore


class TestLoad:
    def test_absent_key_returns_empty(self, snapshots):
        assert snapshots.load() == []

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "{not json",
            "null",
            '{"id": "srv-1"}',
            '[{"id": "srv-1"}]',
            '[{"id": "srv-1", "type": "demo", "status": "EXPLODED"}]',
            "42",
        ],
    )
    def test_corrupt_value_returns_empty(self, kv, snapshots, raw):
        kv.set("ftts_recent_jobs", raw)

        assert snapshots.load() == []

    def test_storage_failure_returns_empty(self):
        storage = Mock()
        storage.get.side_effect = PersistenceError("disk gone", key="ftts_recent_jobs")

        assert JobSnapshotStore(storage).load() == []

    def test_valid_snapshot_is_loaded_in_order(self, snapshots, job_factory):
        snapshots.save([job_factory("srv-2"), job_factory("srv-1")])

        assert [j.id for j in snapshots.load()] == ["srv-2", "srv-1"]


class TestSave:
    def test_keeps_first_fifty(self, kv, snapshots, job_factory):
        jobs = [job_factory(f"srv-{i}") for i in range(60)]

        snapshots.save(jobs)

        stored = json.loads(kv.get("ftts_recent_jobs"))
        assert len(stored) == 50
        assert stored[0]["id"] == "srv-0"
        assert stored[-1]["id"] == "srv-49"

    def test_overwrites_previous_value(self, kv, snapshots, job_factory):
        snapshots.save([job_factory("srv-1"), job_factory("srv-2")])
        snapshots.save([job_factory("srv-3")])

        assert [j["id"] for j in json.loads(kv.get("ftts_recent_jobs"))] == ["srv-3"]

    def test_timestamps_serialized_as_iso8601(self, kv, snapshots, job_factory):
        snapshots.save([job_factory("srv-1")])

        stored = json.loads(kv.get("ftts_recent_jobs"))[0]
        assert "T" in stored["created_at"]
        assert "locked_by" not in stored

    def test_storage_failure_is_not_raised(self, job_factory):
        storage = Mock()
        storage.set.side_effect = PersistenceError("read-only", key="ftts_recent_jobs")

        JobSnapshotStore(storage).save([job_factory("srv-1")])

        storage.set.assert_called_once()


class TestFileKeyValueStore:
    def test_missing_key_returns_none(self, tmp_path):
        assert FileKeyValueStore(tmp_path).get("ftts_recent_jobs") is None

    def test_set_creates_directory_and_file(self, tmp_path):
        directory = tmp_path / "nested" / "cache"
        store = FileKeyValueStore(directory)

        store.set("ftts_recent_jobs", "[]")

        assert (directory / "ftts_recent_jobs.json").read_text(encoding="utf-8") == "[]"
        assert store.get("ftts_recent_jobs") == "[]"

    def test_no_temporary_files_left_behind(self, tmp_path):
        store = FileKeyValueStore(tmp_path)
        store.set("k", "one")
        store.set("k", "two")

        assert os.listdir(tmp_path) == ["k.json"]
        assert store.get("k") == "two"

    def test_delete(self, tmp_path):
        store = FileKeyValueStore(tmp_path)
        store.set("k", "v")

        store.delete("k")
        store.delete("k")

        assert store.get("k") is None

    def test_rejects_path_like_keys(self, tmp_path):
        with pytest.raises(PersistenceError):
            FileKeyValueStore(tmp_path).get("../escape")

    def test_unreadable_file_raises_persistence_error(self, tmp_path):
        (tmp_path / "k.json").mkdir()

        with pytest.raises(PersistenceError):
            FileKeyValueStore(tmp_path).get("k")

    def test_snapshot_store_survives_corrupt_file(self, tmp_path):
        (tmp_path / "ftts_recent_jobs.json").write_bytes(b"\xff\xfe garbage")

        assert JobSnapshotStore(FileKeyValueStore(tmp_path)).load() == []
