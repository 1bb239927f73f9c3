# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/quotedesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent, keeps data).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with active status and document counts.
# - python -m flask users create --name "Admin" --email admin@example.com --password "Password123"
#   Create a user (prompts if options are omitted).
#
# Data repair:
# - python -m flask quotes recompute [--dry-run]
#   Re-run pricing on the stored lines of every quote and material quote.
#
# Maintenance:
# - python -m flask sessions cleanup --retention-days 30
#   Delete expired/revoked session tokens older than the retention window.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User, Quote, MaterialQuote
from .services.auth_service import register_user
from .services import quote_service, material_service, session_service
from .validation import ServiceError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables ready.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
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
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address (login)')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_user_cli(name, email, password):
    """
    Create a new user.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit
    """
    try:
        user = register_user(name, email, password)
    except ServiceError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created user: {user.name} ({user.email}), ID {user.id}")
    click.echo("SECURITY Password securely hashed with bcrypt")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their document counts."""
    users = db.session.query(User).order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<24} {'Email':<32} {'Active':<8} {'Quotes':<8} {'Materials'}")
    click.echo("="*90)

    for user in users:
        quote_count = db.session.query(Quote).filter_by(user_id=user.id).count()
        material_count = db.session.query(MaterialQuote).filter_by(user_id=user.id).count()
        active_str = "Yes" if user.is_active else "No"

        click.echo(f"{user.id:<5} {user.name:<24} {user.email:<32} {active_str:<8} {quote_count:<8} {material_count}")

    click.echo("="*90 + "\n")


@click.group('quotes')
def quotes_group():
    """Quote data repair commands."""


@quotes_group.command('recompute')
@click.option('--dry-run', is_flag=True, help='Report changes without saving')
@with_appcontext
def recompute_quotes(dry_run):
    """
    Recompute totals of every quote and material quote from their stored lines.

    Line amounts are kept as stored; only document totals are rebuilt. No
    version entries are written.
    """
    changed = []

    for quote in db.session.query(Quote).order_by(Quote.id).all():
        if quote_service.recompute_totals(quote):
            changed.append(quote.code)

    for material_quote in db.session.query(MaterialQuote).order_by(MaterialQuote.id).all():
        if material_service.recompute_total(material_quote):
            changed.append(material_quote.code)

    if dry_run:
        db.session.rollback()
        click.echo(f"DRY RUN {len(changed)} document(s) would change: {', '.join(changed) or '-'}")
        return

    db.session.commit()
    click.echo(f"PASS Recomputed {len(changed)} document(s): {', '.join(changed) or '-'}")


@click.group('sessions')
def sessions_group():
    """Session token maintenance commands."""


@sessions_group.command('cleanup')
@click.option('--retention-days', type=int, default=30, show_default=True, help='Keep dead sessions this long')
@with_appcontext
def cleanup_sessions(retention_days):
    """Delete expired and revoked session tokens older than the retention window."""
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"PASS Deleted {deleted} session token(s).")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(quotes_group)
    app.cli.add_command(sessions_group)
