"""PostgreSQL persistence adapter.

Uses psycopg v3 (psycopg[binary]>=3.1.0) for database access.
Mirrors SQLiteAdapter method-for-method with PostgreSQL-specific SQL:
  - %s placeholders instead of ?
  - GENERATED BY DEFAULT AS IDENTITY for store-assigned keys
  - INSERT ... RETURNING to read back the assigned key
  - dict_row cursor factory for dict-based row access

Identifier quoting strategy
----------------------------
PostgreSQL folds unquoted identifiers to lowercase. Field names are
camelCase (e.g. ``passwordHash``), so every table name and column name
in DDL and DML is double-quoted to preserve the original casing and to
avoid conflicts with reserved words such as ``user``.
"""

from __future__ import annotations

import threading
from typing import Any

from recordkeeper.core.types import get_field_type, get_storage_type
from recordkeeper.metadata.loader import RecordType


def _col(name: str) -> str:
    """Return a double-quoted PostgreSQL column identifier.

    Example: _col("passwordHash") → '"passwordHash"'
    """
    return f'"{name}"'


class PostgreSQLAdapter:
    """PostgreSQL persistence adapter using psycopg v3."""

    def __init__(self, url: str):
        # psycopg.connect() wants a plain libpq DSN or postgres:// URL,
        # so strip the +psycopg driver suffix when present.
        self.url = url.replace("postgresql+psycopg://", "postgresql://")
        self.conn: Any = None
        self._lock = threading.RLock()

    def connect(self) -> None:
        """Establish database connection."""
        import psycopg
        from psycopg.rows import dict_row

        self.conn = psycopg.connect(self.url, row_factory=dict_row)
        self.conn.autocommit = False

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def _require_conn(self) -> Any:
        if not self.conn:
            raise RuntimeError("Database not connected")
        return self.conn

    # ------------------------------------------------------------------
    # Identifier helpers
    # ------------------------------------------------------------------

    def _table_name(self, name: str) -> str:
        """Convert record type name to a double-quoted snake_case table name."""
        result = []
        for i, char in enumerate(name):
            if char.isupper() and i > 0:
                result.append("_")
            result.append(char.lower())
        return f'"{"".join(result)}"'

    def _columns(self, record_type: RecordType) -> str:
        return ", ".join(_col(f.name) for f in record_type.fields)

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def initialize_record_type(self, record_type: RecordType) -> None:
        """Create table for record type if it doesn't exist."""
        conn = self._require_conn()

        columns = []
        for field in record_type.fields:
            col_def = f"{_col(field.name)} {get_storage_type(field.type, 'postgresql')}"
            if field.primary_key:
                if record_type.generated_key:
                    col_def += " GENERATED BY DEFAULT AS IDENTITY"
                col_def += " PRIMARY KEY"
            elif field.required:
                col_def += " NOT NULL"
            columns.append(col_def)

        sql = (
            f"CREATE TABLE IF NOT EXISTS {self._table_name(record_type.name)} "
            f"({', '.join(columns)})"
        )
        with self._lock:
            self._execute(conn, sql)
            conn.commit()

    # ------------------------------------------------------------------
    # Record Store primitives
    # ------------------------------------------------------------------

    def find_all(self, record_type: RecordType) -> list[dict[str, Any]]:
        """Fetch every record in store order."""
        conn = self._require_conn()
        sql = f"SELECT {self._columns(record_type)} FROM {self._table_name(record_type.name)}"

        with self._lock:
            rows = self._execute(conn, sql).fetchall()
            conn.commit()
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

        sql = (
            f"SELECT {self._columns(record_type)} FROM {self._table_name(record_type.name)} "
            f"WHERE {_col(field)} = %s LIMIT 1"
        )
        with self._lock:
            row = self._execute(conn, sql, [value]).fetchone()
            conn.commit()

        if row:
            return self._from_row(record_type, row)
        return None

    def save(self, record_type: RecordType, record: dict[str, Any]) -> dict[str, Any]:
        """Insert or overwrite a record, assigning a generated key when absent."""
        conn = self._require_conn()

        pk = record_type.primary_key
        table_name = self._table_name(record_type.name)
        data = {
            f.name: get_field_type(f.type).to_storage(record.get(f.name))
            for f in record_type.fields
        }

        if record_type.generated_key and data.get(pk) is None:
            names = [f.name for f in record_type.value_fields]
            sql = (
                f"INSERT INTO {table_name} ({', '.join(_col(n) for n in names)}) "
                f"VALUES ({', '.join('%s' for _ in names)}) "
                f"RETURNING {self._columns(record_type)}"
            )
        else:
            names = record_type.field_names()
            updates = ", ".join(
                f"{_col(f.name)} = EXCLUDED.{_col(f.name)}" for f in record_type.value_fields
            )
            sql = (
                f"INSERT INTO {table_name} ({', '.join(_col(n) for n in names)}) "
                f"VALUES ({', '.join('%s' for _ in names)}) "
                f"ON CONFLICT ({_col(pk)}) DO UPDATE SET {updates} "
                f"RETURNING {self._columns(record_type)}"
            )

        with self._lock:
            row = self._execute(conn, sql, [data.get(n) for n in names]).fetchone()
            conn.commit()
        return self._from_row(record_type, row)

    def delete(self, record_type: RecordType, key: Any) -> bool:
        """Delete a record."""
        conn = self._require_conn()
        sql = (
            f"DELETE FROM {self._table_name(record_type.name)} "
            f"WHERE {_col(record_type.primary_key)} = %s"
        )
        with self._lock:
            cursor = self._execute(conn, sql, [key])
            conn.commit()
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _execute(self, conn: Any, sql: str, params: list[Any] | None = None) -> Any:
        """Run a statement, rolling back the open transaction when it fails."""
        try:
            return conn.execute(sql, params)
        except Exception:
            conn.rollback()
            raise

    def _from_row(self, record_type: RecordType, row: dict[str, Any]) -> dict[str, Any]:
        return {
            f.name: get_field_type(f.type).from_storage(row[f.name])
            for f in record_type.fields
        }
