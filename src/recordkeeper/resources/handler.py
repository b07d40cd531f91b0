"""Generic authorized CRUD handler, one instance per record type.

Every operation follows the same order:

1. authorization gate (nothing touches storage for a denied caller)
2. existence resolution for keyed operations (get, update, delete)
3. the effect itself (none for reads, a single store write for mutations)

Update and delete check existence and then mutate as two separate store
calls; two concurrent mutations of the same key can interleave between them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from recordkeeper.auth.permissions import Operation, authorize
from recordkeeper.auth.types import CallerContext
from recordkeeper.errors import EntityNotFoundError
from recordkeeper.metadata.loader import RecordType
from recordkeeper.persistence.adapter import PersistenceAdapter
from recordkeeper.resources.payloads import PayloadValidator

logger = logging.getLogger(__name__)


class RecordHandler:
    """List, get, create, update and delete records of one record type."""

    def __init__(self, record_type: RecordType, store: PersistenceAdapter):
        self.record_type = record_type
        self.store = store
        self.payloads = PayloadValidator(record_type)

    @property
    def display_name(self) -> str:
        return self.record_type.display_name

    def _authorize(self, operation: Operation, caller: CallerContext | None) -> None:
        authorize(operation, caller, self.record_type.name)

    def _resolve(self, key: Any) -> dict[str, Any]:
        """Fetch the addressed record or raise the not-found signal."""
        record = self.store.find_by_id(self.record_type, key)
        if record is None:
            logger.info("%s with id %s not found", self.display_name, key)
            raise EntityNotFoundError(self.display_name, key)
        return record

    def list(self, caller: CallerContext | None) -> list[dict[str, Any]]:
        """Return every record in store order."""
        self._authorize(Operation.LIST, caller)
        return self.store.find_all(self.record_type)

    def get(self, caller: CallerContext | None, key: Any) -> dict[str, Any]:
        """Return the record addressed by key."""
        self._authorize(Operation.GET, caller)
        return self._resolve(self.payloads.parse_key(key))

    def create(self, caller: CallerContext | None, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Persist a new record built from a complete field set.

        Generated keys are assigned by the store. A natural key that already
        exists is overwritten, as the store's save is an upsert.
        """
        self._authorize(Operation.CREATE, caller)
        data = self.payloads.for_create(fields)
        if self.record_type.generated_key:
            data[self.record_type.primary_key] = None

        saved = self.store.save(self.record_type, data)
        logger.info(
            "Created %s with id %s", self.display_name, saved[self.record_type.primary_key]
        )
        return saved

    def update(
        self, caller: CallerContext | None, key: Any, fields: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Replace every non-key field of an existing record.

        The key comes only from the address; a key inside ``fields`` is ignored.
        """
        self._authorize(Operation.UPDATE, caller)
        key = self.payloads.parse_key(key)
        existing = self._resolve(key)

        data = self.payloads.for_update(fields)
        data[self.record_type.primary_key] = existing[self.record_type.primary_key]

        saved = self.store.save(self.record_type, data)
        logger.info("Updated %s with id %s", self.display_name, key)
        return saved

    def delete(self, caller: CallerContext | None, key: Any) -> str:
        """Remove an existing record and return a confirmation message."""
        self._authorize(Operation.DELETE, caller)
        key = self.payloads.parse_key(key)
        self._resolve(key)

        self.store.delete(self.record_type, key)
        logger.info("Deleted %s with id %s", self.display_name, key)
        return f"{self.display_name} with id {key} deleted"


def build_handlers(
    record_types: list[RecordType], store: PersistenceAdapter
) -> dict[str, RecordHandler]:
    """Create one handler per record type, keyed by URL path."""
    return {rt.path: RecordHandler(rt, store) for rt in record_types}
