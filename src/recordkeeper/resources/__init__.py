"""Generic record handlers and payload validation."""

from recordkeeper.resources.handler import RecordHandler, build_handlers
from recordkeeper.resources.payloads import PayloadValidator, build_payload_model

__all__ = [
    "RecordHandler",
    "build_handlers",
    "PayloadValidator",
    "build_payload_model",
]
