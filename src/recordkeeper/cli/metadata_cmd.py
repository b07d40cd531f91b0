"""Metadata CLI commands: validate and list."""

from pathlib import Path

import click

from recordkeeper.config import Settings
from recordkeeper.metadata.loader import MetadataError, MetadataLoader
from recordkeeper.metadata.validator import _SUBDIR_SCHEMA, validate_metadata_dir, validate_yaml_file


def _resolve_metadata_path(override: Path | None) -> Path:
    """Use --metadata-path, else RECORDKEEPER_METADATA_PATH, else the bundled descriptors."""
    if override is not None:
        return override
    return Settings.from_env().metadata_path


@click.group()
def metadata():
    """Metadata commands."""
    pass


@metadata.command()
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@click.option(
    "--path",
    "target_path",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="Validate a single YAML file instead of the whole metadata directory.",
)
@click.option(
    "--metadata-path",
    default=None,
    type=click.Path(path_type=Path),
    help="Metadata directory containing record_types/.",
)
def validate(strict: bool, target_path: Path | None, metadata_path: Path | None):
    """Validate record type YAML files against the JSON Schema."""
    metadata_path = _resolve_metadata_path(metadata_path)

    if target_path is not None:
        # Single-file mode: infer schema from parent directory name
        parent = target_path.parent.name
        schema_name = _SUBDIR_SCHEMA.get(parent)
        if schema_name is None:
            click.echo(
                f"Warning: cannot determine schema for directory '{parent}'. "
                f"Expected one of: {', '.join(_SUBDIR_SCHEMA)}.",
                err=True,
            )
            schema_issues = []
        else:
            schema_issues = validate_yaml_file(target_path, schema_name)
    else:
        if not metadata_path.exists():
            click.echo(f"Error: Metadata directory not found at {metadata_path}", err=True)
            raise SystemExit(1)
        schema_issues = validate_metadata_dir(metadata_path, strict=strict)

    errors = [i for i in schema_issues if i.severity == "error"]
    warnings = [i for i in schema_issues if i.severity == "warning"]

    for issue in schema_issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} schema error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    # Semantic checks need the whole directory
    if target_path is None:
        try:
            loader = MetadataLoader(metadata_path)
            loader.load_all()
        except (MetadataError, KeyError) as e:
            click.echo(click.style(f"\nSemantic validation failed: {e}", fg="red"), err=True)
            raise SystemExit(1)

        names = loader.list_record_types()
        click.echo(f"\nLoaded {len(names)} record types:")
        for name in sorted(names):
            record_type = loader.get_record_type(name)
            route = f"/api/{record_type.path}" if record_type.exposed else "internal"
            click.echo(
                f"  ✓ {name} ({len(record_type.fields)} fields, "
                f"{record_type.key.strategy} key, {route})"
            )

    click.echo(click.style("\nAll metadata is valid.", fg="green", bold=True))
