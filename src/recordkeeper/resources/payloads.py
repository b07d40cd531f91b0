"""Payload models built from record type descriptors.

Create and update payloads are validated with pydantic models generated per
record type. Every non-key field is part of the model; required fields must
be present, so an update is always a full replace and never a merge.
"""

from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from recordkeeper.core.types import get_field_type
from recordkeeper.errors import RecordValidationError
from recordkeeper.metadata.loader import FieldDefinition, RecordType


# Both stores keep integers in signed 64-bit columns
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _model_field(field: FieldDefinition) -> tuple[Any, Any]:
    python_type: Any = get_field_type(field.type).python_type
    if python_type is int:
        python_type = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]
    elif python_type is str and field.primary_key:
        # A blank natural key could never be addressed again
        python_type = Annotated[str, Field(min_length=1)]
    if field.required:
        return (python_type, ...)
    return (python_type | None, None)


def build_payload_model(
    record_type: RecordType, include_key: bool, suffix: str = "Payload"
) -> type[BaseModel]:
    """Create a pydantic model for a record type's writable fields.

    Args:
        record_type: The record type descriptor
        include_key: Whether the key field is part of the payload (natural keys on create)
        suffix: Appended to the record type name to name the model

    Returns:
        A BaseModel subclass; unknown fields are ignored
    """
    definitions: dict[str, Any] = {}
    for field in record_type.fields:
        if field.primary_key and not include_key:
            continue
        definitions[field.name] = _model_field(field)

    return create_model(
        f"{record_type.name}{suffix}",
        __config__=ConfigDict(extra="ignore"),
        **definitions,
    )


def _field_errors(exc: ValidationError) -> list[dict[str, str]]:
    errors = []
    for err in exc.errors():
        loc = err.get("loc") or ("__root__",)
        errors.append({"field": str(loc[0]), "message": err.get("msg", "Invalid value")})
    return errors


class PayloadValidator:
    """Validates create/update payloads and record keys for one record type."""

    def __init__(self, record_type: RecordType):
        self.record_type = record_type
        self._create_model = build_payload_model(
            record_type, include_key=not record_type.generated_key, suffix="CreatePayload"
        )
        self._update_model = build_payload_model(
            record_type, include_key=False, suffix="UpdatePayload"
        )

    def for_create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Validate a create payload.

        For generated keys the key is dropped; for natural keys it is required.
        """
        return self._validate(self._create_model, data)

    def for_update(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Validate an update payload. Any key in the payload is ignored."""
        return self._validate(self._update_model, data)

    def parse_key(self, raw: Any) -> Any:
        """Convert an addressed key (usually a query string value) to its stored type."""
        key_field = self.record_type.key_field
        if raw is None or raw == "":
            raise RecordValidationError(
                self.record_type.display_name,
                [{"field": key_field.name, "message": "Field required"}],
            )
        if not self.record_type.generated_key:
            return str(raw)
        try:
            key = int(raw)
        except (TypeError, ValueError):
            raise RecordValidationError(
                self.record_type.display_name,
                [{"field": key_field.name, "message": "Input should be a valid integer"}],
            )
        if not INT64_MIN <= key <= INT64_MAX:
            raise RecordValidationError(
                self.record_type.display_name,
                [{"field": key_field.name, "message": "Input should be a 64-bit integer"}],
            )
        return key

    def _validate(self, model: type[BaseModel], data: Mapping[str, Any]) -> dict[str, Any]:
        if not isinstance(data, Mapping):
            raise RecordValidationError(
                self.record_type.display_name,
                [{"field": "__root__", "message": "Payload must be an object"}],
            )
        try:
            parsed = model.model_validate(dict(data))
        except ValidationError as exc:
            raise RecordValidationError(self.record_type.display_name, _field_errors(exc))
        return parsed.model_dump()
