"""This module defines the 'db' command group for the Budget Tracker CLI."""

import os
from pathlib import Path

import click
from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.exc import SQLAlchemyError

MIGRATIONS_PATH = Path(__file__).resolve().parent.parent / "migrations"


def _alembic_config() -> AlembicConfig:
    """Builds the Alembic configuration pointing at the bundled migrations.

    Returns:
        The Alembic configuration.
    """
    alembic_config = AlembicConfig()
    alembic_config.set_main_option("script_location", str(MIGRATIONS_PATH))
    return alembic_config


def _run(action: str, revision: str) -> None:
    """Runs an Alembic upgrade or downgrade and reports failures to the user.

    Args:
        action: Either 'upgrade' or 'downgrade'.
        revision: The target revision.

    Raises:
        click.Abort: If the migration fails.
    """
    try:
        getattr(command, action)(_alembic_config(), revision)
    except SQLAlchemyError as e:
        click.secho(f"An error occurred during {action}: {e}", fg="red")
        raise click.Abort()


@click.group("db")
@click.option("--schema", default=None, help="The database schema to use.")
def db_group(schema: str | None) -> None:
    """Groups commands related to database management.

    Args:
        schema: The database schema to use.
    """
    if schema:
        os.environ["POSTGRES_DB_SCHEMA"] = schema


@db_group.command("migrate")
def migrate() -> None:
    """Runs database migrations to the latest version."""
    click.echo("Running database migrations...")
    _run("upgrade", "head")
    click.secho("Migrations completed successfully!", fg="green")


@db_group.command("downgrade")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
def downgrade(yes: bool) -> None:
    """Downgrades the database to the previous version.

    Args:
        yes: Skip confirmation prompt.
    """
    if not yes:
        click.confirm(
            "Warning: This is a destructive operation that may result in data loss "
            "(tables will be dropped). Are you sure you want to continue?",
            abort=True,
        )
    click.echo("Downgrading database...")
    _run("downgrade", "-1")
    click.secho("Downgrade completed successfully!", fg="green")


@db_group.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
def reset(yes: bool) -> None:
    """Resets the database by downgrading all migrations and then upgrading to the latest.

    Args:
        yes: Skip confirmation prompt.
    """
    if not yes:
        click.confirm("Are you sure you want to reset the database? This will delete all data.", abort=True)
    click.echo("Downgrading to base...")
    _run("downgrade", "base")
    click.echo("Upgrading to head...")
    _run("upgrade", "head")
    click.secho("Database reset successfully!", fg="green")
