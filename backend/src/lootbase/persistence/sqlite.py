"""SQLite record store with optimistic concurrency."""

import json
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from lootbase.errors import PersistenceError, RecordNotFoundError, VersionConflictError
from lootbase.metadata.loader import CollectionModel, FieldDefinition
from lootbase.persistence.sequences import SequenceService
from lootbase.records.types import Record

VERSION_COLUMN = "_version"

STORAGE_TYPES = {
    "text": "TEXT",
    "bool": "INTEGER",
    "number": "REAL",
    "datetime": "TEXT",
    "relation": "TEXT",
    "relations": "TEXT",  # JSON array of ids
}


class SQLiteRecordStore:
    """SQLite record store.

    Every row carries a version column. save() of an existing record only
    succeeds if the stored version still equals Record.version, so two
    requests that read the same record cannot silently overwrite each
    other. One connection is shared between threads behind a lock.
    """

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None
        self._sequence_service: SequenceService | None = None
        self._collections: dict[str, CollectionModel] = {}
        self._lock = threading.RLock()

    def connect(self) -> None:
        """Establish database connection."""
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._sequence_service = SequenceService(self.conn)

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def initialize_collection(self, collection: CollectionModel) -> None:
        """Create table for collection if it doesn't exist."""
        if not self.conn:
            raise RuntimeError("Database not connected")

        columns = []
        for field in collection.fields:
            col_def = f"{_quote(field.name)} {STORAGE_TYPES[field.type]}"
            if field.primary_key:
                col_def += " PRIMARY KEY"
            columns.append(col_def)
        columns.append(f"{VERSION_COLUMN} INTEGER NOT NULL DEFAULT 1")

        sql = f"CREATE TABLE IF NOT EXISTS {_quote(collection.name)} ({', '.join(columns)})"
        with self._lock:
            self.conn.execute(sql)
            self.conn.commit()
        self._collections[collection.name] = collection

    def find_by_id(self, collection: str, id: str) -> Record:
        """Fetch a single record by ID.

        Raises:
            RecordNotFoundError: If no record has this ID
            PersistenceError: If the lookup itself failed
        """
        model = self._collection(collection)
        sql = f"SELECT * FROM {_quote(model.name)} WHERE {_quote(model.primary_key)} = ?"
        row = self._fetchone(sql, [id])
        if row is None:
            raise RecordNotFoundError(collection, id)
        return self._to_record(model, row)

    def find_first(self, collection: str, field: str, value: Any) -> Record | None:
        """Fetch the first record whose field equals value."""
        model = self._collection(collection)
        if model.get_field(field) is None:
            raise PersistenceError(f"Unknown field '{field}' in '{collection}'")

        sql = f"SELECT * FROM {_quote(model.name)} WHERE {_quote(field)} = ? LIMIT 1"
        row = self._fetchone(sql, [value])
        if row is None:
            return None
        return self._to_record(model, row)

    def save(self, record: Record) -> Record:
        """Insert a new record or compare-and-swap an existing one.

        On success record.version (and generated fields) are updated in
        place and the same record is returned.

        Raises:
            VersionConflictError: If the stored record changed since it was read
            PersistenceError: For any other storage failure
        """
        model = self._collection(record.collection)
        with self._lock:
            try:
                if record.is_new:
                    self._insert(model, record)
                else:
                    self._update(model, record)
            except sqlite3.Error as e:
                self.conn.rollback()
                raise PersistenceError(
                    f"Failed to save record in '{record.collection}': {e}"
                ) from e
        return record

    def _insert(self, model: CollectionModel, record: Record) -> None:
        pk = model.primary_key
        if not record.get(pk):
            record.set(pk, self._sequence_service.next_id(model.name, model.abbreviation))

        now = _now()
        if "created" in model.field_names:
            record.data.setdefault("created", now)
        if "updated" in model.field_names:
            record.set("updated", now)

        row = self._to_row(model, record.data)
        names = list(row)
        placeholders = ", ".join(["?" for _ in names])
        sql = (
            f"INSERT INTO {_quote(model.name)} "
            f"({', '.join(_quote(n) for n in names)}, {VERSION_COLUMN}) "
            f"VALUES ({placeholders}, 1)"
        )
        self.conn.execute(sql, list(row.values()))
        self.conn.commit()
        record.version = 1

    def _update(self, model: CollectionModel, record: Record) -> None:
        pk = model.primary_key
        if "updated" in model.field_names:
            record.set("updated", _now())

        row = self._to_row(model, record.data)
        row.pop(pk, None)
        assignments = [f"{_quote(n)} = ?" for n in row]
        assignments.append(f"{VERSION_COLUMN} = {VERSION_COLUMN} + 1")

        sql = (
            f"UPDATE {_quote(model.name)} SET {', '.join(assignments)} "
            f"WHERE {_quote(pk)} = ? AND {VERSION_COLUMN} = ?"
        )
        cursor = self.conn.execute(sql, [*row.values(), record.id, record.version])

        if cursor.rowcount == 0:
            self.conn.rollback()
            exists = self.conn.execute(
                f"SELECT 1 FROM {_quote(model.name)} WHERE {_quote(pk)} = ?",
                [record.id],
            ).fetchone()
            if exists is None:
                raise PersistenceError(
                    f"Record '{record.id}' in '{model.name}' no longer exists"
                )
            raise VersionConflictError(model.name, record.id, record.version)

        self.conn.commit()
        record.version += 1

    def _collection(self, name: str) -> CollectionModel:
        if not self.conn:
            raise RuntimeError("Database not connected")
        model = self._collections.get(name)
        if model is None:
            raise PersistenceError(f"Collection '{name}' is not initialized")
        return model

    def _fetchone(self, sql: str, params: list[Any]) -> sqlite3.Row | None:
        with self._lock:
            try:
                return self.conn.execute(sql, params).fetchone()
            except sqlite3.Error as e:
                raise PersistenceError(f"Query failed: {e}") from e

    def _to_row(self, model: CollectionModel, data: dict[str, Any]) -> dict[str, Any]:
        """Encode known fields of a record for storage; unknown keys are dropped."""
        return {
            f.name: _encode(f, data[f.name]) for f in model.fields if f.name in data
        }

    def _to_record(self, model: CollectionModel, row: sqlite3.Row) -> Record:
        values = dict(row)
        version = values.pop(VERSION_COLUMN)
        data = {}
        for f in model.fields:
            data[f.name] = _decode(f, values.get(f.name))
        return Record(collection=model.name, data=data, version=version)


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _encode(field: FieldDefinition, value: Any) -> Any:
    if field.type == "bool":
        return 1 if value else 0
    if field.type == "relations":
        return json.dumps(list(value or []))
    return value


def _decode(field: FieldDefinition, value: Any) -> Any:
    if field.type == "bool":
        return bool(value)
    if field.type == "relations":
        return json.loads(value) if value else []
    return value
