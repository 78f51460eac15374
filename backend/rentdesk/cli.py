# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/rentdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: flask --app wsgi <group> <command> [options]
#
# System bootstrap:
# - flask --app wsgi system init [--admin-username admin --admin-email admin@example.com]
#   Create missing tables; optionally create an admin user (prompts for the password).
# - flask --app wsgi system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - flask --app wsgi users create --username bob --email bob@example.com --role user
# - flask --app wsgi users list
# - flask --app wsgi users set-role bob admin
#
# Documents:
# - flask --app wsgi documents reconcile [--fix]
#   Report (and with --fix delete) rows whose blob is missing and blobs with no row.

import click
from flask.cli import with_appcontext

from .config import get_settings
from .errors import ApiError
from .extensions import db
from .services import auth_service, maintenance_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--admin-username', help='Create an admin user with this username')
@click.option('--admin-email', help='Email for the admin user')
@click.option('--admin-password', help='Password for the admin user (prompted if omitted)')
@with_appcontext
def init_system(admin_username, admin_email, admin_password):
    """Create missing tables and optionally an admin user. Idempotent."""
    db.create_all()
    click.echo("PASS Tables created")

    if not admin_username:
        return

    if auth_service.find_by_login(admin_username):
        click.echo(f"SKIP User {admin_username} already exists")
        return

    if not admin_email:
        admin_email = click.prompt('Admin email')
    if not admin_password:
        admin_password = click.prompt('Admin password', hide_input=True, confirmation_prompt=True)

    try:
        user = auth_service.register_user(
            admin_username, admin_email, admin_password, get_settings(), role="admin"
        )
    except ApiError as e:
        raise click.ClickException(e.message)
    click.echo(f"PASS Created admin user {user.username} (ID: {user.id})")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA! Blobs on disk are left alone; run
    `documents reconcile --fix` afterwards to remove them.
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(['admin', 'user']), default='user', show_default=True, help='Role')
@with_appcontext
def create_user_cli(username, email, password, role):
    """Create a new user. Password must be 6-100 characters."""
    try:
        user = auth_service.register_user(username, email, password, get_settings(), role=role)
    except ApiError as e:
        raise click.ClickException(e.message)

    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = auth_service.list_users()
    if not users:
        click.echo("No users found")
        return

    click.echo(f"{'ID':<5} {'Username':<20} {'Email':<30} {'Role':<8}")
    click.echo("=" * 66)
    for user in users:
        click.echo(f"{user.id:<5} {user.username:<20} {user.email:<30} {user.role:<8}")


@users_group.command('set-role')
@click.argument('login')
@click.argument('role', type=click.Choice(['admin', 'user']))
@with_appcontext
def set_role_cli(login, role):
    """Change the role of the user with this username or email."""
    user = auth_service.find_by_login(login)
    if not user:
        raise click.ClickException(f"User {login} not found")
    try:
        auth_service.set_role(user.id, role, get_settings())
    except ApiError as e:
        raise click.ClickException(e.message)
    click.echo(f"PASS {user.username} is now '{role}'")


@click.group('documents')
def documents_group():
    """Document storage maintenance commands."""


@documents_group.command('reconcile')
@click.option('--fix', is_flag=True, help='Delete rows with missing blobs and blobs with no row')
@with_appcontext
def reconcile_documents_cli(fix):
    """Find metadata rows without blobs and blobs without metadata rows."""
    report = maintenance_service.reconcile_documents(get_settings(), fix=fix)

    for missing in report.missing_blobs:
        click.echo(
            f"MISSING BLOB  document {missing.document_id} "
            f"({missing.entity_type}/{missing.entity_id}) -> {missing.file_path}"
        )
    for relative_path in report.orphan_blobs:
        click.echo(f"ORPHAN BLOB   {relative_path}")

    click.echo(
        f"{len(report.missing_blobs)} row(s) without blob, "
        f"{len(report.orphan_blobs)} blob(s) without row"
    )
    if fix:
        click.echo(f"PASS Removed {report.removed_rows} row(s) and {report.removed_blobs} blob(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(documents_group)
