"""User administration commands."""

import click

from recordkeeper.auth.password import PasswordService
from recordkeeper.auth.users import DuplicateUserError, UserDirectory
from recordkeeper.config import Settings
from recordkeeper.metadata.loader import MetadataLoader
from recordkeeper.persistence import create_adapter


def _open_directory(settings: Settings):
    """Connect to the configured store and return (store, directory)."""
    loader = MetadataLoader(settings.metadata_path)
    loader.load_all()
    user_type = loader.get_record_type("User")
    if user_type is None:
        click.echo(f"Error: no User record type under {settings.metadata_path}", err=True)
        raise SystemExit(1)

    settings.database.prepare()

    store = create_adapter(settings.database)
    store.connect()
    store.initialize_record_type(user_type)
    return store, UserDirectory(store, user_type, PasswordService(), settings.admin_emails)


@click.group()
def users():
    """User commands."""
    pass


@users.command("add")
@click.option("--email", required=True, help="Login email.")
@click.option("--name", required=True, help="Display name.")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password (prompted when omitted).",
)
@click.option("--admin", is_flag=True, default=False, help="Grant the ADMIN role.")
def add(email: str, name: str, password: str, admin: bool):
    """Register a user."""
    store, directory = _open_directory(Settings.from_env())
    try:
        user = directory.add_user(email, name, password, admin=admin)
    except DuplicateUserError as e:
        click.echo(click.style(str(e), fg="red"), err=True)
        raise SystemExit(1)
    finally:
        store.close()

    click.echo(f"Created user {user.email} (id {user.user_id}, roles: {', '.join(user.roles)})")


@users.command("list")
def list_users():
    """List registered users."""
    store, directory = _open_directory(Settings.from_env())
    try:
        all_users = directory.list_users()
    finally:
        store.close()

    if not all_users:
        click.echo("No users registered.")
        return

    for user in all_users:
        status = "active" if user.active else "disabled"
        click.echo(f"  {user.user_id}\t{user.email}\t{user.name}\t{','.join(user.roles) or '-'}\t{status}")
