"""recordkeeper CLI entry point."""

import click

from recordkeeper.config import Settings
from recordkeeper.logs import configure_logging


@click.group()
def cli():
    """recordkeeper: authorized record-keeping API and admin CLI."""
    pass


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Port to bind (default: RECORDKEEPER_PORT or 8000).")
@click.option("--reload", is_flag=True, default=False, help="Restart on code changes.")
def serve(host: str, port: int | None, reload: bool):
    """Run the API with uvicorn."""
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(
        "recordkeeper.api.app:create_app",
        factory=True,
        host=host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


# Register subcommand groups
from recordkeeper.cli.metadata_cmd import metadata  # noqa: E402
from recordkeeper.cli.users_cmd import users  # noqa: E402

cli.add_command(metadata)
cli.add_command(users)
