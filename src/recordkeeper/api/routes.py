"""CRUD routes mounted for each exposed record type.

Routes deliberately accept every parameter as optional and hand raw input to
the record handler, so the authorization gate runs before any parameter or
payload validation: an unauthenticated POST with no parameters is a 403, not
a 400.
"""

import json
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from starlette.concurrency import run_in_threadpool

from recordkeeper.api.envelope import message_response, record_response, records_response
from recordkeeper.auth.dependencies import get_current_caller
from recordkeeper.auth.types import CallerContext
from recordkeeper.metadata.loader import FieldDefinition, RecordType
from recordkeeper.resources.handler import RecordHandler

_OPENAPI_TYPES = {
    "id": {"type": "integer"},
    "integer": {"type": "integer"},
    "datetime": {"type": "string", "format": "date-time"},
}


def _openapi_schema(field: FieldDefinition) -> dict[str, Any]:
    return _OPENAPI_TYPES.get(field.type, {"type": "string"})


def _create_parameters(record_type: RecordType) -> list[dict[str, Any]]:
    return [
        {
            "name": f.name,
            "in": "query",
            "required": f.required,
            "schema": _openapi_schema(f),
        }
        for f in record_type.fields
        if not (f.primary_key and record_type.generated_key)
    ]


def _update_body(record_type: RecordType) -> dict[str, Any]:
    properties = {f.name: _openapi_schema(f) for f in record_type.fields}
    required = [f.name for f in record_type.value_fields if f.required]
    return {
        "required": True,
        "content": {
            "application/json": {
                "schema": {"type": "object", "properties": properties, "required": required}
            }
        },
    }


async def _read_json(request: Request) -> Any:
    """Return the decoded JSON body, or None when it is empty or malformed."""
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


def create_record_router(handler: RecordHandler) -> APIRouter:
    """Build the five CRUD routes for one record type."""
    record_type = handler.record_type
    name = record_type.display_name
    router = APIRouter(prefix=f"/api/{record_type.path}", tags=[name])

    @router.get("/all", summary=f"List all {record_type.path}")
    async def list_records(caller: CallerContext | None = Depends(get_current_caller)):
        records = await run_in_threadpool(handler.list, caller)
        return records_response(record_type, records)

    @router.get("", summary=f"Get a single {name}")
    async def get_record(
        id: str | None = Query(None, description=f"{record_type.primary_key} of the {name}"),
        caller: CallerContext | None = Depends(get_current_caller),
    ):
        record = await run_in_threadpool(handler.get, caller, id)
        return record_response(record_type, record)

    @router.post(
        "/post",
        summary=f"Create a new {name}",
        openapi_extra={"parameters": _create_parameters(record_type)},
    )
    async def create_record(
        request: Request,
        caller: CallerContext | None = Depends(get_current_caller),
    ):
        fields = dict(request.query_params)
        record = await run_in_threadpool(handler.create, caller, fields)
        return record_response(record_type, record)

    @router.put(
        "",
        summary=f"Update a single {name}",
        openapi_extra={"requestBody": _update_body(record_type)},
    )
    async def update_record(
        request: Request,
        id: str | None = Query(None, description=f"{record_type.primary_key} of the {name}"),
        caller: CallerContext | None = Depends(get_current_caller),
    ):
        fields = await _read_json(request)
        record = await run_in_threadpool(handler.update, caller, id, fields)
        return record_response(record_type, record)

    @router.delete("", summary=f"Delete a {name}")
    async def delete_record(
        id: str | None = Query(None, description=f"{record_type.primary_key} of the {name}"),
        caller: CallerContext | None = Depends(get_current_caller),
    ):
        message = await run_in_threadpool(handler.delete, caller, id)
        return message_response(message)

    return router
