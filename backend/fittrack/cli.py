# Overview: Flask CLI command groups for bootstrap, user management and maintenance.

# backend/fittrack/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Schema:
# - python -m flask db upgrade
#   Apply migrations (core schema, then the optional feature tables).
#
# System bootstrap:
# - python -m flask system seed-permissions
#   Write the role policy into the permissions table (idempotent).
# - python -m flask system seed-rules
#   Insert the default measurement validation rules that are missing.
#
# Users:
# - python -m flask users list [--role tailor]
# - python -m flask users create --name "Ada" --email ada@fittrack.local --password "Password123!" --role admin [--branch "Main"]
#
# Maintenance:
# - python -m flask maintenance expire-measurements
#   Run the expiry sweep once (same as POST /api/expiry-rules/run).

import click
from flask.cli import with_appcontext

from .errors import ApiError
from .models import ROLES
from .services import auth_service, expiry_service, permission_service, rule_service


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('seed-permissions')
@with_appcontext
def seed_permissions():
    """Populate the permissions table from the role policy."""
    try:
        created = permission_service.seed_permissions()
    except ApiError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Seeded permissions ({created} new rows)")


@system_group.command('seed-rules')
@with_appcontext
def seed_rules():
    """Insert default validation rules."""
    try:
        created = rule_service.seed_default_rules()
    except ApiError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Seeded validation rules ({created} new rows)")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@click.option('--role', type=click.Choice(ROLES), default=None, help='Only this role')
@with_appcontext
def list_users(role):
    users = auth_service.list_users(role)
    if not users:
        click.echo("No users found.")
        return
    for user in users:
        branch = f" [{user.branch}]" if user.branch else ""
        click.echo(f"{user.id:>4}  {user.role:<9} {user.email:<32} {user.name}{branch}")


@users_group.command('create')
@click.option('--name', prompt=True)
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(ROLES), default='tailor', show_default=True)
@click.option('--branch', default=None)
@with_appcontext
def create_user(name, email, password, role, branch):
    """Create a user account."""
    try:
        user = auth_service.create_user(name=name, email=email, password=password, role=role, branch=branch)
    except ApiError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user: {user.email} with role '{user.role}' (ID: {user.id})")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('expire-measurements')
@with_appcontext
def expire_measurements():
    """Run the measurement expiry sweep."""
    result = expiry_service.run_sweep()
    click.echo(f"PASS {result['message']} ({result['reminded']} reminders created)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(maintenance_group)
