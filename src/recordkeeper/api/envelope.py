"""Response bodies for records, confirmation messages and errors."""

from typing import Any

from fastapi.responses import JSONResponse

from recordkeeper.core.types import get_field_type
from recordkeeper.errors import RecordKeeperError
from recordkeeper.metadata.loader import RecordType


def render_record(record_type: RecordType, record: dict[str, Any]) -> dict[str, Any]:
    """Serialize a record with its fields in declared order."""
    return {
        f.name: get_field_type(f.type).to_json(record.get(f.name))
        for f in record_type.fields
    }


def render_records(record_type: RecordType, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [render_record(record_type, r) for r in records]


def record_response(record_type: RecordType, record: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=200, content=render_record(record_type, record))


def records_response(record_type: RecordType, records: list[dict[str, Any]]) -> JSONResponse:
    return JSONResponse(status_code=200, content=render_records(record_type, records))


def message_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=200, content={"message": message})


def error_response(error: RecordKeeperError) -> JSONResponse:
    """Render an expected failure as ``{"type": ..., "message": ...}``."""
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def internal_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"type": "InternalError", "message": "Internal server error"},
    )
