"""Load-all / overwrite-all persistence backends.

Both backends leave the previously written collection intact when a write
fails part-way: the JSON backend writes a temp file and renames it into
place, the SQL backend replaces the rows inside a single transaction.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from sqlalchemy import create_engine, delete, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from narrative.errors import PersistenceReadError, PersistenceWriteError
from narrative.storage.models import Base
from narrative.types import parse_timestamp

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """Durable collection of JSON-compatible records."""

    def load(self) -> list[dict[str, Any]]:
        """Return every stored record; raises PersistenceReadError."""

    def save(self, records: list[dict[str, Any]]) -> None:
        """Replace the stored collection; raises PersistenceWriteError."""


class JsonFileBackend:
    """JSON array in a single file, replaced atomically on every save."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            raise PersistenceReadError(f"Cannot read {self.path}: {exc}") from exc

        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise PersistenceReadError(f"Unexpected layout in {self.path}")
        return data

    def save(self, records: list[dict[str, Any]]) -> None:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceWriteError(f"Cannot write {self.path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug("Could not remove temp file %s", tmp_name)


def create_sql_engine(database_url: str) -> Engine:
    """Create an engine and make sure the narrative tables exist."""
    # Do not log the URL (it may contain secrets).
    engine = create_engine(database_url, echo=False, pool_pre_ping=True)
    Base.metadata.create_all(engine)
    return engine


class SqlBackend:
    """Rows of one model table, replaced in a single transaction per save."""

    def __init__(self, engine: Engine, model: type[Base]) -> None:
        self._engine = engine
        self._model = model

    def load(self) -> list[dict[str, Any]]:
        model = self._model
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(select(model.payload).order_by(model.position)).fetchall()
        except SQLAlchemyError as exc:
            raise PersistenceReadError(f"Cannot read {model.__tablename__}: {exc}") from exc

        records: list[dict[str, Any]] = []
        for (payload,) in rows:
            try:
                record = json.loads(payload)
            except ValueError as exc:
                raise PersistenceReadError(f"Corrupt row in {model.__tablename__}: {exc}") from exc
            if not isinstance(record, dict):
                raise PersistenceReadError(f"Corrupt row in {model.__tablename__}")
            records.append(record)
        return records

    def save(self, records: list[dict[str, Any]]) -> None:
        model = self._model
        try:
            rows = [
                {
                    "position": i,
                    "record_id": str(record.get("id", i)),
                    "payload": json.dumps(record),
                    "recorded_at": _record_time(record),
                }
                for i, record in enumerate(records)
            ]
            with self._engine.begin() as conn:
                conn.execute(delete(model))
                if rows:
                    conn.execute(insert(model), rows)
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            raise PersistenceWriteError(f"Cannot write {model.__tablename__}: {exc}") from exc


def _record_time(record: dict[str, Any]) -> Any:
    value = record.get("timestamp")
    if not value:
        return None
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError):
        return None
