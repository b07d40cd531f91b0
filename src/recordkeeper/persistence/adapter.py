"""PersistenceAdapter Protocol: the Record Store contract shared by all adapters."""

from typing import Any, Protocol, runtime_checkable

from recordkeeper.metadata.loader import RecordType


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Interface all persistence adapters must implement.

    Each primitive is atomic from the caller's point of view. Records are
    plain dicts keyed by field name, in the record type's declared field order.
    Driver errors propagate unchanged.
    """

    # Raw connection handle. Type varies by adapter (sqlite3.Connection,
    # psycopg.Connection).
    conn: Any

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def initialize_record_type(self, record_type: RecordType) -> None: ...

    def find_all(self, record_type: RecordType) -> list[dict[str, Any]]: ...

    def find_by_id(self, record_type: RecordType, key: Any) -> dict[str, Any] | None: ...

    def find_one_by(
        self, record_type: RecordType, field: str, value: Any
    ) -> dict[str, Any] | None: ...

    def save(self, record_type: RecordType, record: dict[str, Any]) -> dict[str, Any]:
        """Upsert a record.

        When the record type's key is generated and the record carries no key,
        a new row is inserted and the store assigns the key. Otherwise the row
        with that key is inserted or fully overwritten.
        """
        ...

    def delete(self, record_type: RecordType, key: Any) -> bool: ...
