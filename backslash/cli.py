import click
from flask import current_app
from flask.cli import with_appcontext

from .exceptions import BackslashError


@click.command('install')
@with_appcontext
def install_command():
    """Migrate entities, seed lookup tables and create the admin user."""
    try:
        report = current_app.extensions['backslash'].install()
    except BackslashError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Migrated {len(report.migrated)} entities")
    click.echo(f"Seeded {report.lookup_rows} lookup rows")
    if report.admin is not None:
        click.echo(f"Created admin user '{report.admin.username}'")
    else:
        click.echo("Admin user already present")


@click.command('migrate-entities')
@with_appcontext
def migrate_entities_command():
    """Create or update the tables of every resolved model."""
    bootstrapper = current_app.extensions['backslash']
    try:
        migrated = bootstrapper.migrate_entities(bootstrapper.resolve_models())
    except BackslashError as exc:
        raise click.ClickException(str(exc)) from exc
    for name in migrated:
        click.echo(name)
