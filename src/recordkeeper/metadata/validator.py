"""
metadata/validator.py: JSON Schema validation for record type YAML files.

Usage:
    from recordkeeper.metadata.validator import validate_metadata_dir, validate_yaml_file

    issues = validate_metadata_dir(Path("metadata"))
    for issue in issues:
        print(issue)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"

# Map subdirectory name → schema filename
_SUBDIR_SCHEMA: dict[str, str] = {
    "record_types": "record_type.schema.json",
}


@dataclass
class ValidationIssue:
    """A single validation finding for a metadata YAML file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "fields[0]/type"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


def _load_schema(name: str) -> dict[str, Any]:
    schema_path = _SCHEMAS_DIR / name
    with schema_path.open() as fh:
        return json.load(fh)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _record_type_rules(raw: dict[str, Any]) -> list[tuple[str, str, str]]:
    """Checks JSON Schema cannot express: key/field consistency and unique field names.

    Returns (path, message, severity) tuples.
    """
    findings: list[tuple[str, str, str]] = []
    names = [f.get("name") for f in raw.get("fields", [])]

    seen: set[str] = set()
    for i, name in enumerate(names):
        if name in seen:
            findings.append((f"fields[{i}]/name", f"Duplicate field name '{name}'", "error"))
        seen.add(name)

    key_field = raw.get("key", {}).get("field")
    if key_field not in seen:
        findings.append(("key/field", f"Key field '{key_field}' is not declared in fields", "error"))
    elif raw.get("key", {}).get("strategy", "generated") == "generated":
        key_def = next(f for f in raw["fields"] if f.get("name") == key_field)
        if key_def.get("required", True):
            findings.append(
                ("key/field", f"Generated key '{key_field}' should be marked required: false", "warning")
            )
    return findings


# Per-schema checks run once the document is schema-valid
_SEMANTIC_RULES = {
    "record_type.schema.json": _record_type_rules,
}


def validate_yaml_file(yaml_path: Path, schema_name: str) -> list[ValidationIssue]:
    """
    Validate a single YAML file against the named schema, then its semantic rules.

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return [
            ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    validator = Draft202012Validator(_load_schema(schema_name))

    issues = [
        ValidationIssue(file=yaml_path, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(raw), key=lambda e: list(e.path))
    ]
    rules = _SEMANTIC_RULES.get(schema_name)
    if issues or rules is None:
        return issues

    return [
        ValidationIssue(file=yaml_path, message=message, path=path, severity=severity)
        for path, message, severity in rules(raw)
    ]



def validate_metadata_dir(
    metadata_dir: Path,
    *,
    strict: bool = False,
) -> list[ValidationIssue]:
    """
    Validate all YAML files under *metadata_dir*.

    Args:
        metadata_dir: Root metadata directory (contains ``record_types/``).
        strict:       If ``True``, warnings are escalated to errors.

    Returns:
        A flat list of :class:`ValidationIssue` objects across all files.
    """
    if not metadata_dir.is_dir():
        return [
            ValidationIssue(
                file=metadata_dir,
                message=f"Metadata directory does not exist: {metadata_dir}",
            )
        ]

    all_issues: list[ValidationIssue] = []

    for subdir, schema_name in _SUBDIR_SCHEMA.items():
        target = metadata_dir / subdir
        if not target.is_dir():
            all_issues.append(
                ValidationIssue(
                    file=target,
                    message=f"No {subdir}/ directory found",
                    severity="warning",
                )
            )
            continue
        for yaml_file in sorted(target.glob("*.yaml")):
            all_issues.extend(validate_yaml_file(yaml_file, schema_name))

    if strict:
        for issue in all_issues:
            if issue.severity == "warning":
                issue.severity = "error"

    for issue in all_issues:
        logger.debug("Metadata issue: %s", issue)

    return all_issues
