"""Errors raised by record handlers and rendered by the API layer."""

from typing import Any


class RecordKeeperError(Exception):
    """Base class for expected, caller-recoverable failures.

    Attributes:
        type_name: Value of the ``type`` field in the error envelope
        status_code: HTTP status the API layer responds with
    """

    type_name = "RecordKeeperError"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type_name, "message": self.message}


class EntityNotFoundError(RecordKeeperError):
    """A keyed operation addressed a record that is not in the store."""

    type_name = "EntityNotFoundException"
    status_code = 404

    def __init__(self, display_name: str, key: Any):
        self.display_name = display_name
        self.key = key
        super().__init__(f"{display_name} with id {key} not found")


class AuthorizationDenied(RecordKeeperError):
    """The caller's roles do not satisfy the policy for an operation."""

    type_name = "AccessDeniedException"
    status_code = 403

    def __init__(self, operation: str, record_type: str | None = None, reason: str | None = None):
        self.operation = operation
        self.record_type = record_type
        target = f" {record_type}" if record_type else ""
        super().__init__(reason or f"Access denied: cannot {operation}{target}")


class RecordValidationError(RecordKeeperError):
    """A create or update payload is missing fields or has malformed values."""

    type_name = "ValidationFailure"
    status_code = 400

    def __init__(self, display_name: str, errors: list[dict[str, str]]):
        self.display_name = display_name
        self.errors = errors
        fields = ", ".join(e["field"] for e in errors)
        super().__init__(f"Invalid {display_name} payload: {fields}")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "errors": self.errors}
