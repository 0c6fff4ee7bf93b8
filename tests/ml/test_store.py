"""Tests for the model artifact store."""

import re

import pytest

from trustscore.ml.store import ModelStore
from trustscore.scoring.errors import PersistenceError


class TestModelStore:
    """Test saving, loading and backing up artifacts."""

    def test_missing_artifact(self, model_store):
        assert not model_store.exists()
        with pytest.raises(PersistenceError):
            model_store.load()

    def test_save_and_load(self, model_store):
        path = model_store.save(b"artifact-bytes")

        assert path == model_store.path
        assert model_store.exists()
        assert model_store.load() == b"artifact-bytes"

    def test_save_replaces_and_leaves_no_temp_files(self, model_store):
        model_store.save(b"first")
        model_store.save(b"second")

        assert model_store.load() == b"second"
        assert [p.name for p in model_store.model_dir.iterdir()] == ["trust_model.joblib"]

    def test_save_failure_wrapped(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = ModelStore(model_dir=blocker / "models")

        with pytest.raises(PersistenceError):
            store.save(b"data")

    def test_info(self, model_store):
        info = model_store.info()
        assert not info.exists
        assert info.message

        model_store.save(b"x" * 2048)
        info = model_store.info()
        assert info.exists
        assert info.size_bytes == 2048
        assert info.path.endswith("trust_model.joblib")
        assert info.last_modified is not None

    def test_backup_without_model(self, model_store):
        with pytest.raises(PersistenceError, match="No model to backup"):
            model_store.backup()

    def test_backup(self, model_store):
        model_store.save(b"v1")
        backup = model_store.backup()

        assert re.fullmatch(r"trust_model_backup_\d{8}_\d{6}_\d{6}\.joblib", backup.name)
        assert backup.read_bytes() == b"v1"
        assert model_store.list_backups() == [backup]

    def test_backups_are_distinct(self, model_store):
        model_store.save(b"v1")
        first = model_store.backup()
        model_store.save(b"v2")
        second = model_store.backup()

        assert first != second
        assert model_store.list_backups() == [first, second]
        assert model_store.load() == b"v2"

    def test_custom_filename(self, tmp_path):
        store = ModelStore(model_dir=tmp_path, filename="rf.joblib")
        store.save(b"data")
        assert (tmp_path / "rf.joblib").read_bytes() == b"data"
