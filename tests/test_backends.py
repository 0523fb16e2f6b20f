"""Tests for JSON and SQL persistence backends."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from narrative.errors import PersistenceReadError, PersistenceWriteError
from narrative.storage.backends import JsonFileBackend, SqlBackend, create_sql_engine
from narrative.storage.history import HistoryStore
from narrative.storage.models import NarrativeScoreRow, StickySignalRow
from tests.conftest import make_score


def test_json_missing_file_is_empty(tmp_path):
    """Test that a missing file loads as an empty collection."""
    assert JsonFileBackend(tmp_path / "missing.json").load() == []


def test_json_save_and_load(tmp_path):
    """Test a save followed by a load, creating parent directories."""
    backend = JsonFileBackend(tmp_path / "nested" / "records.json")
    backend.save([{"id": "a"}, {"id": "b"}])

    assert backend.load() == [{"id": "a"}, {"id": "b"}]
    assert not list((tmp_path / "nested").glob("*.tmp"))


def test_json_object_root_raises_read_error(tmp_path):
    """Test that a file whose root is not an array is rejected, not half-read."""
    path = tmp_path / "history.json"
    path.write_text(json.dumps({"scores": [{"id": "rni-1"}]}), encoding="utf-8")

    with pytest.raises(PersistenceReadError, match="Unexpected layout"):
        JsonFileBackend(path).load()


def test_json_corrupt_raises_read_error(tmp_path):
    """Test that unparseable content raises PersistenceReadError."""
    path = tmp_path / "bad.json"
    path.write_text("not json", encoding="utf-8")

    with pytest.raises(PersistenceReadError, match="Cannot read"):
        JsonFileBackend(path).load()


def test_json_failed_write_keeps_previous_file(tmp_path):
    """Test that a failure during replace leaves the old content and no temp file."""
    path = tmp_path / "records.json"
    backend = JsonFileBackend(path)
    backend.save([{"id": "old"}])

    with patch("narrative.storage.backends.os.replace", side_effect=OSError("boom")):
        with pytest.raises(PersistenceWriteError, match="Cannot write"):
            backend.save([{"id": "new"}])

    assert backend.load() == [{"id": "old"}]
    assert not list(tmp_path.glob("*.tmp"))


def test_json_unserializable_raises_write_error(tmp_path):
    """Test that non-JSON values surface as PersistenceWriteError."""
    with pytest.raises(PersistenceWriteError):
        JsonFileBackend(tmp_path / "r.json").save([{"id": object()}])


@pytest.fixture
def sql_engine(tmp_path):
    engine = create_sql_engine(f"sqlite:///{tmp_path / 'narrative.db'}")
    yield engine
    engine.dispose()


def test_sql_save_and_load_in_order(sql_engine):
    """Test that records come back in saved order."""
    backend = SqlBackend(sql_engine, StickySignalRow)
    backend.save([{"id": "b"}, {"id": "a"}])

    assert backend.load() == [{"id": "b"}, {"id": "a"}]


def test_sql_save_replaces_collection(sql_engine):
    """Test overwrite-all semantics."""
    backend = SqlBackend(sql_engine, StickySignalRow)
    backend.save([{"id": "a"}, {"id": "b"}])
    backend.save([{"id": "c"}])

    assert backend.load() == [{"id": "c"}]


def test_sql_failed_write_keeps_previous_rows(sql_engine):
    """Test that a failing insert rolls back the delete."""
    backend = SqlBackend(sql_engine, StickySignalRow)
    backend.save([{"id": "a"}])

    # Duplicate record ids violate the unique constraint
    with pytest.raises(PersistenceWriteError):
        backend.save([{"id": "x"}, {"id": "x"}])

    assert backend.load() == [{"id": "a"}]


def test_history_store_on_sql(sql_engine, clock):
    """Test the history store on top of the SQL backend."""
    store = HistoryStore(SqlBackend(sql_engine, NarrativeScoreRow), clock=clock)
    store.append(make_score(42))

    reopened = HistoryStore(SqlBackend(sql_engine, NarrativeScoreRow), clock=clock)
    assert reopened.latest().overall == 42
