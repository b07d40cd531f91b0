"""SQLite persistence adapter."""

import sqlite3
import threading
from pathlib import Path
from typing import Any

from recordkeeper.core.types import get_field_type, get_storage_type
from recordkeeper.metadata.loader import RecordType


class SQLiteAdapter:
    """Simple SQLite persistence adapter.

    One connection is shared by all request threads; every primitive runs
    under a lock so a single find/save/delete is atomic.
    """

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def connect(self) -> None:
        """Establish database connection."""
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def _require_conn(self) -> sqlite3.Connection:
        if not self.conn:
            raise RuntimeError("Database not connected")
        return self.conn

    def initialize_record_type(self, record_type: RecordType) -> None:
        """Create table for record type if it doesn't exist."""
        conn = self._require_conn()

        columns = []
        for field in record_type.fields:
            col_def = f"{field.name} {get_storage_type(field.type)}"
            if field.primary_key:
                col_def += " PRIMARY KEY"
                if record_type.generated_key:
                    col_def += " AUTOINCREMENT"
            elif field.required:
                col_def += " NOT NULL"
            columns.append(col_def)

        table_name = self._table_name(record_type.name)
        sql = f"CREATE TABLE IF NOT EXISTS {table_name} ({', '.join(columns)})"
        with self._lock:
            conn.execute(sql)
            conn.commit()

    def find_all(self, record_type: RecordType) -> list[dict[str, Any]]:
        """Fetch every record in store order."""
        conn = self._require_conn()

        table_name = self._table_name(record_type.name)
        sql = f"SELECT {self._columns(record_type)} FROM {table_name}"

        with self._lock:
            rows = conn.execute(sql).fetchall()
        return [self._from_row(record_type, row) for row in rows]

    def find_by_id(self, record_type: RecordType, key: Any) -> dict[str, Any] | None:
        """Fetch a single record by key."""
        return self.find_one_by(record_type, record_type.primary_key, key)

    def find_one_by(
        self, record_type: RecordType, field: str, value: Any
    ) -> dict[str, Any] | None:
        """Fetch the first record whose field equals value."""
        conn = self._require_conn()
        if record_type.get_field(field) is None:
            raise ValueError(f"Unknown field '{field}' on {record_type.name}")

        table_name = self._table_name(record_type.name)
        sql = f"SELECT {self._columns(record_type)} FROM {table_name} WHERE {field} = ? LIMIT 1"

        with self._lock:
            row = conn.execute(sql, [value]).fetchone()

        if row:
            return self._from_row(record_type, row)
        return None

    def save(self, record_type: RecordType, record: dict[str, Any]) -> dict[str, Any]:
        """Insert or overwrite a record, assigning a generated key when absent."""
        conn = self._require_conn()

        pk = record_type.primary_key
        table_name = self._table_name(record_type.name)
        data = self._to_row(record_type, record)

        with self._lock:
            if record_type.generated_key and data.get(pk) is None:
                field_names = [f.name for f in record_type.value_fields]
                placeholders = ", ".join("?" for _ in field_names)
                sql = (
                    f"INSERT INTO {table_name} ({', '.join(field_names)}) "
                    f"VALUES ({placeholders})"
                )
                cursor = conn.execute(sql, [data.get(f) for f in field_names])
                key = cursor.lastrowid
            else:
                field_names = record_type.field_names()
                placeholders = ", ".join("?" for _ in field_names)
                updates = ", ".join(
                    f"{f.name} = excluded.{f.name}" for f in record_type.value_fields
                )
                sql = (
                    f"INSERT INTO {table_name} ({', '.join(field_names)}) "
                    f"VALUES ({placeholders}) "
                    f"ON CONFLICT({pk}) DO UPDATE SET {updates}"
                )
                conn.execute(sql, [data.get(f) for f in field_names])
                key = data[pk]
            conn.commit()

            return self.find_by_id(record_type, key)  # type: ignore[return-value]

    def delete(self, record_type: RecordType, key: Any) -> bool:
        """Delete a record."""
        conn = self._require_conn()

        table_name = self._table_name(record_type.name)
        pk = record_type.primary_key
        sql = f"DELETE FROM {table_name} WHERE {pk} = ?"

        with self._lock:
            cursor = conn.execute(sql, [key])
            conn.commit()

        return cursor.rowcount > 0

    def _columns(self, record_type: RecordType) -> str:
        return ", ".join(record_type.field_names())

    def _to_row(self, record_type: RecordType, record: dict[str, Any]) -> dict[str, Any]:
        return {
            f.name: get_field_type(f.type).to_storage(record.get(f.name))
            for f in record_type.fields
        }

    def _from_row(self, record_type: RecordType, row: sqlite3.Row) -> dict[str, Any]:
        return {
            f.name: get_field_type(f.type).from_storage(row[f.name])
            for f in record_type.fields
        }

    def _table_name(self, name: str) -> str:
        """Convert record type name to table name."""
        # Simple snake_case conversion
        result = []
        for i, char in enumerate(name):
            if char.isupper() and i > 0:
                result.append("_")
            result.append(char.lower())
        return "".join(result)
