"""Load and resolve record type descriptors from YAML files."""

from pathlib import Path
from dataclasses import dataclass, field
from typing import Any
import yaml

from recordkeeper.core.types import FIELD_TYPES

# Bundled descriptors shipped with the package
DEFAULT_METADATA_PATH = Path(__file__).parent


@dataclass
class FieldDefinition:
    name: str
    type: str
    display_name: str
    required: bool = True
    primary_key: bool = False


@dataclass
class KeyConfig:
    """How a record type is keyed."""

    field: str
    strategy: str = "generated"  # "generated" | "natural"


@dataclass
class RecordType:
    name: str
    display_name: str
    path: str
    key: KeyConfig
    fields: list[FieldDefinition]
    description: str = ""
    exposed: bool = True

    @property
    def primary_key(self) -> str:
        return self.key.field

    @property
    def generated_key(self) -> bool:
        return self.key.strategy == "generated"

    @property
    def key_field(self) -> FieldDefinition:
        return self.get_field(self.key.field)  # type: ignore[return-value]

    @property
    def value_fields(self) -> list[FieldDefinition]:
        """Fields replaced by an update (everything except the key)."""
        return [f for f in self.fields if not f.primary_key]

    def get_field(self, name: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


class MetadataError(ValueError):
    """Raised when record type descriptors are inconsistent."""


class MetadataLoader:
    """Loads record type definitions from YAML files."""

    def __init__(self, metadata_path: Path | None = None):
        self.metadata_path = metadata_path or DEFAULT_METADATA_PATH
        self.record_types: dict[str, RecordType] = {}

    def load_all(self) -> None:
        """Load all record types and check them for consistency."""
        self._load_record_types()
        self._validate_paths()

    def _load_record_types(self) -> None:
        types_path = self.metadata_path / "record_types"
        if not types_path.exists():
            return

        for yaml_file in sorted(types_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
                if data and "recordType" in data:
                    record_type = self._resolve_record_type(data)
                    if record_type.name in self.record_types:
                        raise MetadataError(
                            f"Record type '{record_type.name}' is defined more than once"
                        )
                    self.record_types[record_type.name] = record_type

    def _validate_paths(self) -> None:
        """Validate URL paths are unique among exposed record types."""
        seen: dict[str, str] = {}  # path -> record type name

        for name, record_type in self.record_types.items():
            if not record_type.exposed:
                continue
            if record_type.path in seen:
                raise MetadataError(
                    f"Duplicate path '{record_type.path}' used by both "
                    f"'{seen[record_type.path]}' and '{name}'"
                )
            seen[record_type.path] = name

    def _resolve_record_type(self, data: dict) -> RecordType:
        """Resolve a record type definition."""
        name = data["recordType"]

        key_data = data.get("key", {})
        key = KeyConfig(
            field=key_data.get("field", "id"),
            strategy=key_data.get("strategy", "generated"),
        )

        fields = [self._resolve_field(f, key) for f in data.get("fields", [])]

        record_type = RecordType(
            name=name,
            display_name=data.get("displayName", name),
            path=data.get("path", self._to_path(name)),
            key=key,
            fields=fields,
            description=data.get("description", ""),
            exposed=data.get("exposed", True),
        )
        self._check_key(record_type)
        return record_type

    def _resolve_field(self, data: dict, key: KeyConfig) -> FieldDefinition:
        """Convert field dict to FieldDefinition."""
        name = data["name"]
        field_type = data.get("type", "string")
        if field_type not in FIELD_TYPES:
            raise MetadataError(f"Field '{name}' has unknown type '{field_type}'")

        return FieldDefinition(
            name=name,
            type=field_type,
            display_name=data.get("displayName", self._to_display_name(name)),
            required=data.get("required", True),
            primary_key=name == key.field,
        )

    def _check_key(self, record_type: RecordType) -> None:
        key_field = record_type.get_field(record_type.key.field)
        if key_field is None:
            raise MetadataError(
                f"Record type '{record_type.name}' has no field named "
                f"'{record_type.key.field}' for its key"
            )
        if record_type.key.strategy == "generated" and key_field.type != "id":
            raise MetadataError(
                f"Record type '{record_type.name}': generated keys must use the 'id' type"
            )
        if record_type.key.strategy == "natural" and key_field.type not in ("string", "text"):
            raise MetadataError(
                f"Record type '{record_type.name}': natural keys must be text"
            )
        if record_type.key.strategy not in ("generated", "natural"):
            raise MetadataError(
                f"Record type '{record_type.name}' has unknown key strategy "
                f"'{record_type.key.strategy}'"
            )

    def _to_display_name(self, name: str) -> str:
        """Convert camelCase to Title Case."""
        result = []
        for i, char in enumerate(name):
            if char.isupper() and i > 0:
                result.append(" ")
            result.append(char)
        return "".join(result).title()

    def _to_path(self, name: str) -> str:
        return name.lower() + "s"

    def get_record_type(self, name: str) -> RecordType | None:
        """Get a resolved record type by name."""
        return self.record_types.get(name)

    def list_record_types(self) -> list[str]:
        """List all record type names."""
        return list(self.record_types.keys())

    def exposed_record_types(self) -> list[RecordType]:
        """Record types that get generic CRUD routes."""
        return [rt for rt in self.record_types.values() if rt.exposed]

    def to_dict(self, record_type: RecordType) -> dict[str, Any]:
        """Describe a record type for API responses."""
        return {
            "recordType": record_type.name,
            "displayName": record_type.display_name,
            "path": record_type.path,
            "key": {
                "field": record_type.key.field,
                "strategy": record_type.key.strategy,
            },
            "fields": [
                {
                    "name": f.name,
                    "displayName": f.display_name,
                    "type": f.type,
                    "required": f.required,
                    "primaryKey": f.primary_key,
                }
                for f in record_type.fields
            ],
        }
