"""Field type registry with storage and conversion defaults.

These are the types a record type descriptor may declare. The bundled
descriptors use id, string, text and integer; datetime is available to
descriptor authors and travels as ISO-8601 text in payloads and responses.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _datetime_to_storage(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _identity(value: Any) -> Any:
    return value


@dataclass
class FieldType:
    name: str
    python_type: type
    sqlite_type: str
    postgres_type: str
    # Converts a Python value into what the driver stores
    to_storage: Callable[[Any], Any] = _identity
    # Converts a stored value back into the Python value
    from_storage: Callable[[Any], Any] = _identity
    # JSON rendering for response bodies
    to_json: Callable[[Any], Any] = _identity


# Built-in field types
FIELD_TYPES: dict[str, FieldType] = {
    "id": FieldType(
        name="id",
        python_type=int,
        sqlite_type="INTEGER",
        postgres_type="BIGINT",
    ),
    "string": FieldType(
        name="string",
        python_type=str,
        sqlite_type="TEXT",
        postgres_type="TEXT",
    ),
    "text": FieldType(
        name="text",
        python_type=str,
        sqlite_type="TEXT",
        postgres_type="TEXT",
    ),
    "integer": FieldType(
        name="integer",
        python_type=int,
        sqlite_type="INTEGER",
        postgres_type="BIGINT",
    ),
    "datetime": FieldType(
        name="datetime",
        python_type=datetime,
        sqlite_type="TEXT",  # ISO-8601
        postgres_type="TIMESTAMP",
        to_storage=_datetime_to_storage,
        from_storage=lambda v: None if v is None else _to_datetime(v),
        to_json=lambda v: v.isoformat() if isinstance(v, datetime) else v,
    ),
}


def get_field_type(type_name: str) -> FieldType:
    """Get field type definition, defaulting to string."""
    return FIELD_TYPES.get(type_name, FIELD_TYPES["string"])


def get_storage_type(type_name: str, dialect: str = "sqlite") -> str:
    """Get the column type for a field type in the given SQL dialect."""
    field_type = get_field_type(type_name)
    if dialect == "postgresql":
        return field_type.postgres_type
    return field_type.sqlite_type
